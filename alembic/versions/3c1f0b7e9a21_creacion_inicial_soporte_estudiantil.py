"""
Creacion inicial de la base de datos de soporte estudiantil

Revision ID: 3c1f0b7e9a21
Revises:
Create Date: 2025-09-02 10:14:27.118903

Descripción:
Crea las tablas de usuarios (herencia de tabla única estudiante/personal),
tickets, notas de ticket, notificaciones y el contador de numeración de tickets.
Los catálogos (roles, categorías, estados, prioridades) son enums de la
aplicación guardados como VARCHAR, por lo que no requieren tablas propias.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f0b7e9a21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === USUARIOS ===
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tipo", sa.String(length=20), nullable=False),
        sa.Column("nombre", sa.String(length=100), nullable=False),
        sa.Column("apellido", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("rol", sa.String(length=30), nullable=False),
        sa.Column("contrasena", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # Estudiante
        sa.Column("matricula", sa.String(length=20), nullable=True),
        sa.Column("email_personal", sa.String(length=255), nullable=True),
        sa.Column("telefono", sa.String(length=30), nullable=True),
        sa.Column("carrera", sa.String(length=150), nullable=True),
        # Personal
        sa.Column("cedula", sa.String(length=20), nullable=True),
        sa.Column("edad", sa.Integer(), nullable=True),
        sa.Column("categorias_asignadas", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_usuarios")),
    )
    op.create_index(op.f("ix_usuarios_email"), "usuarios", ["email"], unique=True)
    op.create_index(op.f("ix_usuarios_rol"), "usuarios", ["rol"], unique=False)
    op.create_index(op.f("ix_usuarios_tipo"), "usuarios", ["tipo"], unique=False)
    op.create_index(op.f("ix_usuarios_matricula"), "usuarios", ["matricula"], unique=False)

    # === TICKETS ===
    op.create_table(
        "tickets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("solicitante_id", sa.Uuid(), nullable=False),
        sa.Column("solicitante_nombre", sa.String(length=200), nullable=False),
        sa.Column("solicitante_email", sa.String(length=255), nullable=False),
        sa.Column("solicitante_matricula", sa.String(length=20), nullable=True),
        sa.Column("titulo", sa.String(length=200), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=False),
        sa.Column("categoria", sa.String(length=30), nullable=False),
        sa.Column("estado", sa.String(length=20), nullable=False),
        sa.Column("prioridad", sa.String(length=10), nullable=False),
        sa.Column("tipo_problema", sa.String(length=150), nullable=True),
        sa.Column("asignado_a", sa.Uuid(), nullable=True),
        sa.Column("asignado_nombre", sa.String(length=200), nullable=True),
        sa.Column("resuelto_en", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resuelto_por", sa.Uuid(), nullable=True),
        sa.Column("resuelto_por_nombre", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tickets")),
    )
    op.create_index(op.f("ix_tickets_numero"), "tickets", ["numero"], unique=True)
    op.create_index(op.f("ix_tickets_solicitante_id"), "tickets", ["solicitante_id"], unique=False)
    op.create_index(op.f("ix_tickets_categoria"), "tickets", ["categoria"], unique=False)
    op.create_index(op.f("ix_tickets_estado"), "tickets", ["estado"], unique=False)
    op.create_index(op.f("ix_tickets_asignado_a"), "tickets", ["asignado_a"], unique=False)
    op.create_index(op.f("ix_tickets_created_at"), "tickets", ["created_at"], unique=False)

    # === NOTAS DE TICKET ===
    op.create_table(
        "notas_ticket",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ticket_id", sa.Uuid(), nullable=False),
        sa.Column("texto", sa.Text(), nullable=False),
        sa.Column("autor_id", sa.Uuid(), nullable=False),
        sa.Column("autor_nombre", sa.String(length=200), nullable=False),
        sa.Column("autor_rol", sa.String(length=30), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["ticket_id"], ["tickets.id"],
            name=op.f("fk_notas_ticket_ticket_id_tickets"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notas_ticket")),
    )
    op.create_index(op.f("ix_notas_ticket_ticket_id"), "notas_ticket", ["ticket_id"], unique=False)

    # === NOTIFICACIONES ===
    op.create_table(
        "notificaciones",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("usuario_id", sa.Uuid(), nullable=False),
        sa.Column("mensaje", sa.Text(), nullable=False),
        sa.Column("tipo", sa.String(length=20), nullable=False),
        sa.Column("leido", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("fecha_leido", sa.DateTime(timezone=True), nullable=True),
        sa.Column("referencia_id", sa.Uuid(), nullable=True),
        sa.Column("referencia_numero", sa.String(length=20), nullable=True),
        sa.ForeignKeyConstraint(
            ["usuario_id"], ["usuarios.id"],
            name=op.f("fk_notificaciones_usuario_id_usuarios"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notificaciones")),
    )
    op.create_index(op.f("ix_notificaciones_usuario_id"), "notificaciones", ["usuario_id"], unique=False)
    op.create_index(op.f("ix_notificaciones_tipo"), "notificaciones", ["tipo"], unique=False)
    op.create_index(op.f("ix_notificaciones_leido"), "notificaciones", ["leido"], unique=False)
    op.create_index(op.f("ix_notificaciones_created_at"), "notificaciones", ["created_at"], unique=False)
    op.create_index(op.f("ix_notificaciones_referencia_id"), "notificaciones", ["referencia_id"], unique=False)

    # === SECUENCIAS ===
    secuencias = op.create_table(
        "secuencias",
        sa.Column("nombre", sa.String(length=50), nullable=False),
        sa.Column("valor", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("nombre", name=op.f("pk_secuencias")),
    )
    op.bulk_insert(secuencias, [{"nombre": "tickets", "valor": 0}])


def downgrade() -> None:
    op.drop_table("secuencias")
    op.drop_index(op.f("ix_notificaciones_referencia_id"), table_name="notificaciones")
    op.drop_index(op.f("ix_notificaciones_created_at"), table_name="notificaciones")
    op.drop_index(op.f("ix_notificaciones_leido"), table_name="notificaciones")
    op.drop_index(op.f("ix_notificaciones_tipo"), table_name="notificaciones")
    op.drop_index(op.f("ix_notificaciones_usuario_id"), table_name="notificaciones")
    op.drop_table("notificaciones")
    op.drop_index(op.f("ix_notas_ticket_ticket_id"), table_name="notas_ticket")
    op.drop_table("notas_ticket")
    op.drop_index(op.f("ix_tickets_created_at"), table_name="tickets")
    op.drop_index(op.f("ix_tickets_asignado_a"), table_name="tickets")
    op.drop_index(op.f("ix_tickets_estado"), table_name="tickets")
    op.drop_index(op.f("ix_tickets_categoria"), table_name="tickets")
    op.drop_index(op.f("ix_tickets_solicitante_id"), table_name="tickets")
    op.drop_index(op.f("ix_tickets_numero"), table_name="tickets")
    op.drop_table("tickets")
    op.drop_index(op.f("ix_usuarios_matricula"), table_name="usuarios")
    op.drop_index(op.f("ix_usuarios_tipo"), table_name="usuarios")
    op.drop_index(op.f("ix_usuarios_rol"), table_name="usuarios")
    op.drop_index(op.f("ix_usuarios_email"), table_name="usuarios")
    op.drop_table("usuarios")

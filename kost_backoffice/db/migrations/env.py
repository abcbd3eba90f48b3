from logging.config import fileConfig
from sqlalchemy import pool
from alembic import context

# -----------------------------
# Import SQLAlchemy Base + Models
# (config loads .env on import)
# -----------------------------
from kost_backoffice.core.config import DATABASE_URL
from kost_backoffice.db.session import Base
from kost_backoffice.models.booking import Booking
from kost_backoffice.models.booking_document import BookingDocument

# -----------------------------
# Alembic Configuration
# -----------------------------
config = context.config

# -----------------------------
# Inject DATABASE_URL from .env
# -----------------------------
config.set_main_option("sqlalchemy.url", DATABASE_URL)

# -----------------------------
# Setup logging (Optional)
# -----------------------------
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# -----------------------------
# Metadata for autogenerate
# -----------------------------
target_metadata = Base.metadata


# ===============================================================
# OFFLINE MIGRATIONS
# ===============================================================
def run_migrations_offline():
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")

    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


# ===============================================================
# ONLINE MIGRATIONS
# ===============================================================
def run_migrations_online():
    """Run migrations in 'online' mode."""

    from sqlalchemy import create_engine

    url = config.get_main_option("sqlalchemy.url")

    connectable = create_engine(
        url,
        poolclass=pool.NullPool
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
        )

        with context.begin_transaction():
            context.run_migrations()


# ===============================================================
# EXECUTION MODE (online/offline)
# ===============================================================
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

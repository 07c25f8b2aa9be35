from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context

# -----------------------------
# Models register themselves on Base.metadata
# -----------------------------
from app.db.session import Base, DATABASE_URL
from app.models.booking import Booking  # noqa: F401
from app.models.payment import Payment  # noqa: F401
from app.models.vehicle_rate import VehicleRate  # noqa: F401

config = context.config

# Same database the API talks to; an explicit -x url=... wins
url = context.get_x_argument(as_dictionary=True).get("url", DATABASE_URL)
config.set_main_option("sqlalchemy.url", url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite cannot ALTER constraints in place
RENDER_AS_BATCH = url.startswith("sqlite")


# ===============================================================
# OFFLINE (emit SQL)
# ===============================================================
def run_migrations_offline():
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=RENDER_AS_BATCH,
    )

    with context.begin_transaction():
        context.run_migrations()


# ===============================================================
# ONLINE (apply to the database)
# ===============================================================
def run_migrations_online():
    connectable = create_engine(url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=RENDER_AS_BATCH,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

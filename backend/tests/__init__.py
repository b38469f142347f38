import os

# Keep the application's module-level engine off the on-disk default database.
os.environ.setdefault("DATABASE_URL", "sqlite://")

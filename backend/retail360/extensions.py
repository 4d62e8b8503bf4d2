# Overview: Flask extension instances shared by the app factory, models and CLI.

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# SQLite cannot ALTER constraints in place; batch mode rebuilds the table.
migrate = Migrate(render_as_batch=True, compare_type=True)

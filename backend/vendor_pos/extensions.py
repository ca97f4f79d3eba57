# backend/vendor_pos/extensions.py
# Unbound extension instances; create_app() binds them to the app.
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

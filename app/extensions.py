from flask_sqlalchemy import SQLAlchemy

# Database instance shared by every blueprint
db = SQLAlchemy()

# -*- coding: utf-8 -*-
from flask_sqlalchemy import SQLAlchemy

# Bound to the app in create_app(); services receive db.session explicitly.
db = SQLAlchemy()

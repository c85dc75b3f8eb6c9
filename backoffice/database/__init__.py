# -*- coding: utf-8 -*-
from backoffice.database.db import db

__all__ = ["db"]

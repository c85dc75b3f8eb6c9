# -*- coding: utf-8 -*-
"""
Middleware package for the backoffice service.
"""
from .auth import require_admin_token
from .errors import register_error_handlers

__all__ = ['require_admin_token', 'register_error_handlers']

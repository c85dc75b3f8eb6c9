# -*- coding: utf-8 -*-
from backoffice.schemas.base import parse_args, parse_body

__all__ = ['parse_args', 'parse_body']

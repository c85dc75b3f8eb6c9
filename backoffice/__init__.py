# -*- coding: utf-8 -*-
"""Empire Run backoffice: cloud saves, gameplay reports, bans and license keys."""

__version__ = "1.0.0"

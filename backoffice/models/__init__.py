# -*- coding: utf-8 -*-
from backoffice.database import db

from .order import Order, OrderStatus
from .license_key import LicenseKey, LicenseKeyStatus
from .account import AccountReport, AccountAchievement, AccountDevice, AccountWarning
from .device_ban import DeviceBan
from .cloud_save import CloudSave, CloudLog

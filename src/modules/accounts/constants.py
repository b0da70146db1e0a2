from django.db import models


class UserRole(models.TextChoices):
    MEMBER = "member", "Member"
    KIOSK = "kiosk", "Kiosk"
    BARISTA = "barista", "Barista"
    ADMIN = "admin", "Admin"


ROLE_CLAIM = "role"
EMAIL_CLAIM = "email"

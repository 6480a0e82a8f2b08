"""Users app package.

Defines the custom user model (email login, ``user``/``admin`` roles) and
the JWT authentication endpoints. Use ``apps.users.models.CustomUser`` as
the AUTH_USER_MODEL throughout the project.
"""

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="FederatedSession",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("sid", models.CharField(db_index=True, max_length=255)),
                ("session_key", models.CharField(db_index=True, max_length=40)),
                (
                    "tenant",
                    models.CharField(default="carbon.super", max_length=255),
                ),
                ("idp_name", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["sid"], name="fedlogout_sid_idx"),
                    models.Index(
                        fields=["session_key"], name="fedlogout_session_key_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FederatedIdentity",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "tenant",
                    models.CharField(default="carbon.super", max_length=255),
                ),
                ("idp_name", models.CharField(max_length=255)),
                ("subject", models.CharField(max_length=255)),
                ("last_login", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="federated_identities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "idp_name", "subject"),
                        name="fedlogout_unique_identity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="IdentityProvider",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "tenant",
                    models.CharField(
                        db_index=True, default="carbon.super", max_length=255
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "issuer",
                    models.CharField(blank=True, db_index=True, max_length=512),
                ),
                ("client_id", models.CharField(blank=True, max_length=255)),
                ("jwks_uri", models.URLField(blank=True, max_length=512)),
                (
                    "signing_key",
                    models.TextField(blank=True, help_text="PEM encoded public key"),
                ),
                (
                    "entity_id",
                    models.CharField(
                        blank=True,
                        help_text="Issuer identifier of the resident IdP",
                        max_length=512,
                    ),
                ),
                ("algorithms", models.CharField(default="RS256", max_length=255)),
                (
                    "backend_name",
                    models.CharField(
                        blank=True,
                        help_text="social-auth backend name, defaults to the IdP name",
                        max_length=255,
                    ),
                ),
                ("is_resident", models.BooleanField(default=False)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tenant", "name"), name="fedlogout_unique_idp_name"
                    ),
                ],
            },
        ),
    ]

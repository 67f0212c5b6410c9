from django.apps import AppConfig


class TransactionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.transactions"
    label = "transactions"
    verbose_name = "Sales transactions"

import django_filters

from modules.transactions.constants import TransactionStatus
from modules.transactions.models import Transaction


class TransactionFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(
        field_name="status", choices=TransactionStatus.choices
    )
    customer = django_filters.UUIDFilter(field_name="customer_id")
    start_date = django_filters.DateFilter(
        field_name="created_at__date", lookup_expr="gte"
    )
    end_date = django_filters.DateFilter(
        field_name="created_at__date", lookup_expr="lte"
    )

    class Meta:
        model = Transaction
        fields = ["status", "customer", "start_date", "end_date"]

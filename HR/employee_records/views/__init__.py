from .record_views import (
    employee_record,
    employee_access
)
from .rule_views import (
    column_rules
)
from .rbac_views import (
    rbac_roles,
    rbac_permissions,
    rbac_me
)
from .report_views import (
    employee_report
)

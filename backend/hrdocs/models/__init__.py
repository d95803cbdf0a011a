from hrdocs.models.company import Company
from hrdocs.models.employee import Employee
from hrdocs.models.document import EmployeeDocument
from hrdocs.models.report import AccidentReport, IllnessReport
from hrdocs.models.receipt import Receipt
from hrdocs.models.activity_log import ActivityLog

__all__ = [
    "Company", "Employee", "EmployeeDocument", "AccidentReport",
    "IllnessReport", "Receipt", "ActivityLog",
]

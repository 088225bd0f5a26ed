from workledger.models.bill import Bill
from workledger.models.contractor import Contractor
from workledger.models.contractor_work_done import ContractorWorkDone
from workledger.models.job_ops_ledger import JobOpsLedger
from workledger.models.operation import Operation
from workledger.models.series import Series

__all__ = [
    "Bill",
    "Contractor",
    "ContractorWorkDone",
    "JobOpsLedger",
    "Operation",
    "Series",
]

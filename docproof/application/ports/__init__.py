"""Application ports (abstract interfaces) for DocProof.

Ports decouple the coordinators from the ledger and storage technology:
- ContentAddresserProtocol: content -> DocumentDigest
- LedgerGatewayProtocol: raw document-registry contract access
- LedgerRegistryProtocol: typed registry operations with error translation
- DocumentIndexProtocol: local index of registrations
- TimeAuthorityProtocol: injected clock
"""

from docproof.application.ports.content_addresser import ContentAddresserProtocol
from docproof.application.ports.document_index import (
    MAX_PAGE_SIZE,
    RECENT_DOCUMENTS_LIMIT,
    DocumentFilter,
    DocumentIndexProtocol,
    DocumentPage,
    DocumentSort,
    GroupCount,
    IndexStatistics,
    PageRequest,
    RecentDocument,
    SortDirection,
    SortField,
    group_counts,
)
from docproof.application.ports.ledger_gateway import (
    EVENT_DOCUMENT_REGISTERED,
    EVENT_DOCUMENT_VERIFIED,
    LedgerEvent,
    LedgerGatewayProtocol,
    RawLedgerDocument,
    RegistrationLog,
    TransactionReceipt,
)
from docproof.application.ports.ledger_registry import (
    LedgerRegistryProtocol,
    LedgerStats,
    RegistrationReceipt,
    RegistrationReference,
    VerificationObservation,
)
from docproof.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "EVENT_DOCUMENT_REGISTERED",
    "EVENT_DOCUMENT_VERIFIED",
    "MAX_PAGE_SIZE",
    "RECENT_DOCUMENTS_LIMIT",
    "ContentAddresserProtocol",
    "DocumentFilter",
    "DocumentIndexProtocol",
    "DocumentPage",
    "DocumentSort",
    "GroupCount",
    "IndexStatistics",
    "LedgerEvent",
    "LedgerGatewayProtocol",
    "LedgerRegistryProtocol",
    "LedgerStats",
    "PageRequest",
    "RawLedgerDocument",
    "RecentDocument",
    "RegistrationLog",
    "RegistrationReceipt",
    "RegistrationReference",
    "SortDirection",
    "SortField",
    "TimeAuthorityProtocol",
    "TransactionReceipt",
    "VerificationObservation",
    "group_counts",
]

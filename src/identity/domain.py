"""Identity bounded context — user address books.

Owns each user's saved addresses and the default/primary address flags.
"""

import structlog
from protean.domain import Domain

identity = Domain(name="identity")

logger = structlog.get_logger(__name__)

"""
Declarative base untuk audit tables.
"""

import re
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import as_declarative, declared_attr

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@as_declarative()
class Base:
    """
    Base class untuk semua models.
    Nama table diturunkan dari nama class: VerificationAttempt -> verification_attempts.
    """

    @declared_attr
    def __tablename__(cls) -> str:
        name = _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()
        return name if name.endswith("s") else name + "s"

    def to_dict(self, exclude: Optional[set] = None) -> Dict[str, Any]:
        """
        Serialize kolom ke dictionary (datetime -> ISO, UUID -> str).

        Args:
            exclude: Nama kolom yang tidak diikutkan

        Returns:
            Dictionary kolom
        """
        exclude = exclude or set()
        data = {}

        for column in inspect(self.__class__).columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, uuid.UUID):
                value = str(value)
            data[column.name] = value

        return data

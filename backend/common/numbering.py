# backend/common/numbering.py
from __future__ import annotations

import logging
import re
from typing import Optional, Type

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import Model
from django.db.models.functions import Length

logger = logging.getLogger(__name__)

SAVE_ATTEMPTS = 3


def number_start() -> int:
    return int(settings.SERVICEDESK.get("NUMBER_START", 1000))


def next_number(model: Type[Model], field: str, prefix: str, start: Optional[int] = None) -> str:
    """
    Next human-readable identifier for `model.<field>`, e.g. "T-1000", "T-1001".

    Longer values sort first, so "T-10000" follows "T-9999" and only the
    rows up to the first well-formed number are read.
    """
    start = number_start() if start is None else start
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    existing = (
        model._default_manager.filter(**{f"{field}__startswith": prefix})
        .order_by(Length(field).desc(), f"-{field}")
        .values_list(field, flat=True)
    )
    for value in existing.iterator():
        m = pattern.match(value or "")
        if m:
            return f"{prefix}{max(int(m.group(1)) + 1, start)}"
    return f"{prefix}{start}"


class NumberedModel(models.Model):
    """
    Assigns `number_field` from the SERVICEDESK prefix named by `number_prefix_key`
    on first save. Two writers can pick the same number; the unique index rejects
    the loser, which draws again.
    """
    number_field: str = ""
    number_prefix_key: str = ""

    class Meta:
        abstract = True

    def number_prefix(self) -> str:
        return settings.SERVICEDESK[self.number_prefix_key]

    def save(self, *args, **kwargs):
        if not self._state.adding or getattr(self, self.number_field):
            return super().save(*args, **kwargs)
        for attempt in range(1, SAVE_ATTEMPTS + 1):
            setattr(self, self.number_field, next_number(type(self), self.number_field, self.number_prefix()))
            try:
                with transaction.atomic():
                    return super().save(*args, **kwargs)
            except IntegrityError:
                if attempt == SAVE_ATTEMPTS:
                    raise
                logger.warning("%s %s already taken, retrying",
                               self.number_field, getattr(self, self.number_field))

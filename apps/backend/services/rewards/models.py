"""
Rewards Records (Typed Documents)
=================================

One record type per collection. Store documents are untyped JSON with
camelCase keys; every record names the fields the rewards rules read and
keeps everything else in `extra` so a round trip never drops caller data.

- UserRecord        users        (key = email)
- OrderRecord       orders
- RedemptionRecord  redemptions
- PriceRecord       config/goldPrice
- ShopRecord        shops
- ContactQuery      queries

No DB access here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

USERS = "users"
ORDERS = "orders"
REDEMPTIONS = "redemptions"
CONFIG = "config"
SHOPS = "shops"
QUERIES = "queries"

GOLD_PRICE_KEY = "goldPrice"

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
REDEMPTION_STATUSES = (STATUS_PENDING, STATUS_APPROVED)


def doc_field(name: str, default: Any = None) -> Any:
    return field(default=default, metadata={"doc": name})


def to_number(v: Any) -> Optional[float]:
    """Finite float for numbers and numeric strings, None otherwise."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        n = float(v)
    elif isinstance(v, str):
        try:
            n = float(v.strip())
        except ValueError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def clean_email(v: Any) -> Optional[str]:
    """Email as stored and matched everywhere: stripped, or None when blank."""
    if not isinstance(v, str):
        return None
    return v.strip() or None


def merge_fields(
    existing: Mapping[str, Any],
    patch: Mapping[str, Any],
    protected: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Shallow merge: keys in `patch` overwrite, keys absent from `patch` persist.
    A protected key keeps its existing value whenever `existing` has one.
    """
    merged = dict(existing)
    locked = {k for k in protected if existing.get(k) is not None}
    for k, v in patch.items():
        if k in locked:
            continue
        merged[k] = v
    return merged


class DocumentRecord:
    """Mixin for dataclass records: `id`, doc-mapped fields, `extra`."""

    id: str
    extra: Dict[str, Any]

    @classmethod
    def _doc_fields(cls) -> Tuple[Tuple[str, str], ...]:
        return tuple((f.name, f.metadata["doc"]) for f in fields(cls) if "doc" in f.metadata)  # type: ignore[arg-type]

    @classmethod
    def from_doc(cls, key: str, data: Mapping[str, Any]):
        mapped = cls._doc_fields()
        doc_keys = {doc for _, doc in mapped}
        known = {attr: data.get(doc) for attr, doc in mapped}
        extra = {k: v for k, v in data.items() if k not in doc_keys and k != "id"}
        return cls(id=str(key), extra=extra, **known)  # type: ignore[call-arg]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        for attr, doc in self._doc_fields():
            value = getattr(self, attr)
            if value is not None:
                out[doc] = value
        for k, v in self.extra.items():
            out.setdefault(k, v)
        return out


@dataclass
class UserRecord(DocumentRecord):
    id: str
    email: Optional[str] = doc_field("email")
    created_at: Optional[str] = doc_field("createdAt")
    updated_at: Optional[str] = doc_field("updatedAt")
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrderRecord(DocumentRecord):
    id: str
    custom_id: Optional[str] = doc_field("_customId")
    order_id: Optional[Any] = doc_field("orderId")
    user_email: Optional[str] = doc_field("userEmail")
    reward_grams: Optional[Any] = doc_field("rewardGrams")
    created_at: Optional[str] = doc_field("createdAt")
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def grams(self) -> float:
        return to_number(self.reward_grams) or 0.0

    @property
    def is_claimed(self) -> bool:
        return bool(self.user_email)


@dataclass
class RedemptionRecord(DocumentRecord):
    id: str
    custom_id: Optional[str] = doc_field("_customId")
    email: Optional[str] = doc_field("email")
    grams: Optional[Any] = doc_field("grams")
    status: Optional[str] = doc_field("status")
    approved_at: Optional[str] = doc_field("approvedAt")
    created_at: Optional[str] = doc_field("createdAt")
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def amount(self) -> float:
        return to_number(self.grams) or 0.0

    @property
    def is_approved(self) -> bool:
        return self.status == STATUS_APPROVED

    @property
    def is_outstanding(self) -> bool:
        return self.status in REDEMPTION_STATUSES


@dataclass
class PriceRecord(DocumentRecord):
    id: str
    price: Optional[Any] = doc_field("price")
    updated_at: Optional[str] = doc_field("updatedAt")
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ShopRecord(DocumentRecord):
    id: str
    name: Optional[str] = doc_field("name")
    shop_id: Optional[Any] = doc_field("shopId")
    image: Optional[str] = doc_field("image")
    url: Optional[str] = doc_field("url")
    total_distributed: Optional[Any] = doc_field("totalDistributed")
    created_at: Optional[str] = doc_field("createdAt")
    updated_at: Optional[str] = doc_field("updatedAt")
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ContactQuery(DocumentRecord):
    id: str
    custom_id: Optional[str] = doc_field("_customId")
    name: Optional[str] = doc_field("name")
    brand: Optional[str] = doc_field("brand")
    email: Optional[str] = doc_field("email")
    website: Optional[str] = doc_field("website")
    message: Optional[str] = doc_field("message")
    created_at: Optional[str] = doc_field("createdAt")
    extra: Dict[str, Any] = field(default_factory=dict)

from __future__ import annotations

from typing import Protocol, Sequence

from .model import Customer


class CustomerRepository(Protocol):
    def get_by_ids(self, customer_ids: Sequence[int]) -> Sequence[Customer]:
        raise NotImplementedError

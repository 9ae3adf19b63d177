from __future__ import annotations
from abc import ABC, abstractmethod

class AccountInterface(ABC):
    @abstractmethod
    async def get_or_create_account():
        pass

    @abstractmethod
    async def adjust_balance():
        pass

    @abstractmethod
    async def get_account():
        pass

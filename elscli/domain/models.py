from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    return int(value)


@dataclass(frozen=True)
class EulaInfringement:
    """Одно нарушение EULA лицензии."""

    eulaPeriod: str = ""
    year: int = 0
    month: int = 0
    eulaPolicyId: str = ""
    vendorId: str = ""
    featureId: str = ""
    licenceSetId: str = ""
    licenceIndex: int = 0
    numUsers: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EulaInfringement":
        return cls(
            eulaPeriod=_str(data, "eulaPeriod"),
            year=_int(data, "year"),
            month=_int(data, "month"),
            eulaPolicyId=_str(data, "eulaPolicyId"),
            vendorId=_str(data, "vendorId"),
            featureId=_str(data, "featureId"),
            licenceSetId=_str(data, "licenceSetId"),
            licenceIndex=_int(data, "licenceIndex"),
            numUsers=_int(data, "numUsers"),
        )


@dataclass(frozen=True)
class CustomerEulaInfringements:
    """Нарушения одного клиента за период."""

    elsCustomerId: str = ""
    vendorCustomerId: str = ""
    infringements: list[EulaInfringement] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomerEulaInfringements":
        return cls(
            elsCustomerId=_str(data, "elsCustomerId"),
            vendorCustomerId=_str(data, "vendorCustomerId"),
            infringements=[EulaInfringement.from_dict(item) for item in data.get("infringements") or []],
        )


@dataclass(frozen=True)
class InfringementPage:
    """
    Назначение/ответственность:
        Одна страница ответа customerLicenceEulaInfringements.
    Инварианты/гарантии:
        - Пустой cursor означает последнюю страницу.
        - Порядок клиентов и нарушений совпадает с порядком в ответе.
    """

    cursor: str = ""
    customerInfringements: list[CustomerEulaInfringements] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InfringementPage":
        if not isinstance(data, dict):
            raise ValueError("infringement page must be a JSON object")
        return cls(
            cursor=_str(data, "cursor"),
            customerInfringements=[
                CustomerEulaInfringements.from_dict(item) for item in data.get("customerInfringements") or []
            ],
        )

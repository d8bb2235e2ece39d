from __future__ import annotations

import csv
import json
import logging
from typing import IO

from elscli.domain.models import InfringementPage
from elscli.domain.ports.execution import RequestExecutorProtocol, RequestSpec
from elscli.errors import ResponseDecodeError, UnexpectedResponseError
from elscli.loggingSetup import logEvent

REPORT_HEADER = [
    "elsCustomerID",
    "vendorCustomerID",
    "eulaPeriod",
    "year",
    "month",
    "eulaPolicyID",
    "featureID",
    "licenseSetID",
    "licenseIndex",
    "numUsers",
]


def infringementsPath(vendorId: str, year: int, month: int) -> str:
    return f"/vendors/{vendorId}/customerLicenceEulaInfringements/month/{year}/{month}"


def flattenPage(page: InfringementPage) -> list[list[str]]:
    """Одна CSV-строка на нарушение; порядок: клиент, затем нарушение."""
    rows: list[list[str]] = []
    for customer in page.customerInfringements:
        for item in customer.infringements:
            rows.append(
                [
                    customer.elsCustomerId,
                    customer.vendorCustomerId,
                    item.eulaPeriod,
                    str(item.year),
                    str(item.month),
                    item.eulaPolicyId,
                    item.featureId,
                    item.licenceSetId,
                    str(item.licenceIndex),
                    str(item.numUsers),
                ]
            )
    return rows


class InfringementReportUseCase:
    """
    Назначение/ответственность:
        Выгрузка отчёта о нарушениях EULA лицензий клиентов вендора за месяц в CSV.
    Взаимодействия:
        - RequestExecutorProtocol для постраничного чтения (cursor).
    Ограничения:
        - Строки накапливаются в памяти и пишутся одним документом после последней страницы.
    """

    def __init__(
        self,
        executor: RequestExecutorProtocol,
        logger: logging.Logger | None = None,
        run_id: str = "-",
    ):
        self.executor = executor
        self.logger = logger
        self.run_id = run_id

    def fetchPage(self, path: str, cursor: str) -> InfringementPage:
        """
        Назначение:
            Получает одну страницу результатов, начиная с cursor (или с начала, если cursor пуст).
        Ошибки:
            UnexpectedResponseError при статусе != 200, ResponseDecodeError при невалидном теле.
        """
        query = {"cursor": cursor} if cursor else None
        response = self.executor.execute(RequestSpec.get(path, query=query))
        if response.status_code != 200:
            raise UnexpectedResponseError(response.status_code)
        try:
            data = json.loads((response.body or b"").decode("utf-8"))
            return InfringementPage.from_dict(data)
        except (UnicodeDecodeError, ValueError, TypeError, AttributeError) as exc:
            raise ResponseDecodeError(str(exc)) from exc

    def collectRows(self, vendorId: str, year: int, month: int) -> list[list[str]]:
        path = infringementsPath(vendorId, year, month)
        rows: list[list[str]] = []
        cursor = ""
        pages = 0
        while True:
            page = self.fetchPage(path, cursor)
            pages += 1
            rows.extend(flattenPage(page))
            cursor = page.cursor
            if not cursor:
                break
        if self.logger is not None:
            logEvent(
                self.logger,
                logging.INFO,
                self.run_id,
                "report",
                f"infringements vendor={vendorId} period={year}/{month} pages={pages} rows={len(rows)}",
            )
        return rows

    def export(self, vendorId: str, year: int, month: int, stream: IO[str]) -> int:
        """
        Контракт (вход/выход):
            Вход: vendorId, год, месяц, поток вывода.
            Выход: количество строк данных; CSV (заголовок + строки) записан в stream.
        """
        rows = self.collectRows(vendorId, year, month)
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerows([REPORT_HEADER, *rows])
        return len(rows)

from __future__ import annotations

import io
import json

import pytest

from elscli.domain.ports.execution import ApiResponse, RequestSpec
from elscli.errors import ResponseDecodeError, UnexpectedResponseError
from elscli.usecases.infringement_report import InfringementReportUseCase

HEADER = "elsCustomerID,vendorCustomerID,eulaPeriod,year,month,eulaPolicyID,featureID,licenseSetID,licenseIndex,numUsers\n"


def infringement(policy: str, users: int) -> dict:
    return {
        "eulaPeriod": "month",
        "year": 2018,
        "month": 7,
        "eulaPolicyId": policy,
        "vendorId": "V1",
        "featureId": "F1",
        "licenceSetId": "L1",
        "licenceIndex": 2,
        "numUsers": users,
    }


class PagedExecutor:
    def __init__(self, pages: list[tuple[int, dict | bytes]]):
        self.pages = pages
        self.calls: list[RequestSpec] = []

    def execute(self, request: RequestSpec) -> ApiResponse:
        status, payload = self.pages[len(self.calls)]
        self.calls.append(request)
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        return ApiResponse(status_code=status, body=body)


def run_export(executor: PagedExecutor) -> str:
    stream = io.StringIO()
    InfringementReportUseCase(executor).export("V1", 2018, 7, stream)
    return stream.getvalue()


def test_export_example_two_pages():
    executor = PagedExecutor(
        [
            (
                200,
                {
                    "cursor": "c1",
                    "customerInfringements": [
                        {
                            "elsCustomerId": "A",
                            "vendorCustomerId": "VA",
                            "infringements": [infringement("P1", 5)],
                        }
                    ],
                },
            ),
            (200, {"cursor": "", "customerInfringements": []}),
        ]
    )

    assert run_export(executor) == HEADER + "A,VA,month,2018,7,P1,F1,L1,2,5\n"
    assert [c.path for c in executor.calls] == ["/vendors/V1/customerLicenceEulaInfringements/month/2018/7"] * 2
    assert executor.calls[0].query is None
    assert executor.calls[1].query == {"cursor": "c1"}


def test_export_with_no_infringements_writes_header_only():
    executor = PagedExecutor([(200, {"cursor": "", "customerInfringements": []})])
    assert run_export(executor) == HEADER


def test_export_preserves_page_customer_and_row_order():
    executor = PagedExecutor(
        [
            (
                200,
                {
                    "cursor": "next",
                    "customerInfringements": [
                        {"elsCustomerId": "A", "vendorCustomerId": "VA", "infringements": [infringement("P1", 1), infringement("P2", 2)]},
                        {"elsCustomerId": "B", "vendorCustomerId": "VB", "infringements": [infringement("P3", 3)]},
                    ],
                },
            ),
            (
                200,
                {
                    "cursor": "",
                    "customerInfringements": [
                        {"elsCustomerId": "C", "vendorCustomerId": "", "infringements": [infringement("P4", 4)]},
                    ],
                },
            ),
        ]
    )

    lines = run_export(executor).splitlines()

    assert [line.split(",")[0] + ":" + line.split(",")[5] for line in lines[1:]] == ["A:P1", "A:P2", "B:P3", "C:P4"]


def test_export_aborts_on_unexpected_status_without_output():
    executor = PagedExecutor(
        [
            (200, {"cursor": "c1", "customerInfringements": [{"elsCustomerId": "A", "infringements": [infringement("P1", 5)]}]}),
            (500, {"error": "boom"}),
        ]
    )
    stream = io.StringIO()

    with pytest.raises(UnexpectedResponseError) as exc:
        InfringementReportUseCase(executor).export("V1", 2018, 7, stream)

    assert exc.value.status_code == 500
    assert stream.getvalue() == ""


def test_export_invalid_page_body_is_decode_error():
    executor = PagedExecutor([(200, b"not json")])

    with pytest.raises(ResponseDecodeError):
        run_export(executor)


def test_export_quotes_fields_with_commas():
    executor = PagedExecutor(
        [
            (
                200,
                {
                    "cursor": "",
                    "customerInfringements": [
                        {"elsCustomerId": "A", "vendorCustomerId": "Acme, Inc", "infringements": [infringement("P1", 5)]}
                    ],
                },
            )
        ]
    )

    assert run_export(executor) == HEADER + 'A,"Acme, Inc",month,2018,7,P1,F1,L1,2,5\n'

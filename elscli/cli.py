from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable

import typer

from elscli import __version__
from elscli.common.run_id import generate_run_id
from elscli.common.sanitize import maskSecret
from elscli.config import DEFAULT_PROFILE_NAME, Config, Profile, loadConfig
from elscli.domain.ports.execution import RequestSpec
from elscli.errors import AppError
from elscli.infra.http.els_client import ElsApiClient
from elscli.infra.http.request_executor import ElsRequestExecutor
from elscli.infra.http.signer import ElsRequestSigner
from elscli.infra.secrets import PromptPasswordProvider
from elscli.infra.sources.input_resolver import InputResolver
from elscli.loggingSetup import closeRunLogger, createRunLogger, logEvent
from elscli.usecases.access_key_usecase import AccessKeyCreateUseCase, accessKeysPath
from elscli.usecases.infringement_report import InfringementReportUseCase
from elscli.usecases.response_formatter import formatResponse

URL_HELP = "The path and query string of the API call without the domain or version prefix - e.g. 'vendors/...'"
CONTENT_HELP = "The file containing the JSON to be sent as the request body (default: piped input)"

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Make API calls to Elastic Licensing")
usersApp = typer.Typer(no_args_is_help=True)
accessKeysApp = typer.Typer(no_args_is_help=True)
vendorsApp = typer.Typer(no_args_is_help=True)
rulesetsApp = typer.Typer(no_args_is_help=True)
cloudProvidersApp = typer.Typer(no_args_is_help=True)
doApp = typer.Typer(no_args_is_help=True)


@dataclass(frozen=True)
class AppContext:
    """
    Назначение/ответственность:
        Состояние одного запуска, передаваемое в обработчики команд через typer.Context.obj.
    Инварианты/гарантии:
        - profile уже содержит переопределения из CLI/ENV и не меняется до конца запуска.
        - scope хранит идентификаторы из групп команд (vendorId, rulesetId, email...).
    """

    runId: str
    profileName: str
    profile: Profile
    config: Config
    logger: logging.Logger
    scope: dict[str, str] = field(default_factory=dict)

    def withScope(self, **ids: str) -> "AppContext":
        return replace(self, scope={**self.scope, **ids})


def createClient(appCtx: AppContext) -> ElsApiClient:
    """
    Назначение:
        Создаёт клиент ELS API по профилю запуска.
    """
    profile = appCtx.profile
    return ElsApiClient(
        baseUrl=profile.apiUrl,
        signer=ElsRequestSigner(profile.accessKey),
        maxTries=profile.maxApiTries,
        logger=appCtx.logger,
        runId=appCtx.runId,
    )


def createPasswordProvider():
    return PromptPasswordProvider(stream=sys.stdout)


def runCommand(ctx: typer.Context, commandName: str, runner: Callable[[AppContext], None]) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - пишет начало/конец команды в лог
        - фатальные ошибки печатает одной строкой в stderr и завершает с exit code 2

    Поведение:
        - HTTP-ответы с ошибочным статусом не считаются фатальными: они печатаются форматтером.
    """
    appCtx: AppContext = ctx.obj
    logger = appCtx.logger
    runId = appCtx.runId

    logEvent(logger, logging.INFO, runId, "core", f"Command started command={commandName}")
    try:
        runner(appCtx)
    except AppError as exc:
        logEvent(logger, logging.DEBUG, runId, "core", f"Fatal Error code={exc.code} error={exc}")
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)
    except OSError as exc:
        logEvent(logger, logging.DEBUG, runId, "core", f"Fatal Error io error={exc}")
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)
    logEvent(logger, logging.INFO, runId, "core", f"Command finished command={commandName}")


def callApi(ctx: typer.Context, commandName: str, spec: RequestSpec) -> None:
    """Выполняет один API-вызов и печатает ответ в режиме вывода профиля."""

    def execute(appCtx: AppContext) -> None:
        with createClient(appCtx) as client:
            executor = ElsRequestExecutor(client, InputResolver())
            response = executor.execute(spec)
        formatResponse(response, appCtx.profile.output, sys.stdout)

    runCommand(ctx, commandName, execute)


def _versionCallback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    profile: str = typer.Option(
        DEFAULT_PROFILE_NAME,
        "--profile",
        "-p",
        envvar="ELSCLI_PROFILE",
        help="Profile in ~/.els/els-cli.toml which supplies credentials",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        envvar="ELSCLI_OUTPUT",
        help="Overrides the output format defined in the profile: wholeResponse|bodyOnly|statusCodeOnly",
    ),
    config: str | None = typer.Option(None, "--config", envvar="ELSCLI_CONFIG", help="Path to els-cli.toml"),
    logFile: str | None = typer.Option(None, "--log-file", envvar="ELSCLI_LOG_FILE", help="Path to the log file"),
    logLevel: str = typer.Option("DEBUG", "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_versionCallback,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id и настраивает лог
        - читает конфиг и выбирает профиль (CLI > ENV > профиль)
        - сохраняет AppContext в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    try:
        logger, _logFilePath = createRunLogger(logFile, runId, logLevel)
    except (OSError, ValueError) as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)
    ctx.call_on_close(lambda: closeRunLogger(logger))

    try:
        loaded = loadConfig(config)
        selected = loaded.resolveProfile(profile).withOutput(output)
    except (AppError, OSError) as exc:
        logEvent(logger, logging.DEBUG, runId, "config", f"Fatal Error error={exc}")
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    accessKey = selected.accessKey
    logEvent(
        logger,
        logging.DEBUG,
        runId,
        "config",
        f"profile={profile} config={loaded.path} output={selected.output.value} "
        f"max_api_tries={selected.maxApiTries} access_key_id={accessKey.id if accessKey else None} "
        f"secret={maskSecret(accessKey.secretAccessKey if accessKey else None)}",
    )

    ctx.obj = AppContext(
        runId=runId,
        profileName=profile,
        profile=selected,
        config=loaded,
        logger=logger,
    )


# users


@usersApp.callback()
def users(ctx: typer.Context, email: str = typer.Argument(..., metavar="EMAIL", help="The email address of the user")):
    ctx.obj = ctx.obj.withScope(email=email)


@accessKeysApp.command("create")
def accessKeysCreate(
    ctx: typer.Context,
    expiry_days: int = typer.Argument(30, metavar="EXPIRYDAYS", help="Number of days before expiry."),
):
    """Create a new API Access Key"""

    def execute(appCtx: AppContext) -> None:
        with createClient(appCtx) as client:
            usecase = AccessKeyCreateUseCase(
                client=client,
                passwordProvider=createPasswordProvider(),
                timeoutSeconds=appCtx.profile.apiTimeoutSecs,
                logger=appCtx.logger,
                run_id=appCtx.runId,
            )
            usecase.create(appCtx.scope["email"], expiry_days, sys.stdout)

    runCommand(ctx, "access-keys-create", execute)


@accessKeysApp.command("delete")
def accessKeysDelete(
    ctx: typer.Context,
    access_key_id: str = typer.Argument(..., metavar="ACCESSKEYID", help="The ID of the Access Key to be deleted"),
):
    """Delete an API Access Key"""
    callApi(ctx, "access-keys-delete", RequestSpec.delete(accessKeysPath(ctx.obj.scope["email"], access_key_id)))


@accessKeysApp.command("list")
def accessKeysList(ctx: typer.Context):
    """List API Access Keys"""
    callApi(ctx, "access-keys-list", RequestSpec.get(accessKeysPath(ctx.obj.scope["email"])))


# vendors


@vendorsApp.callback()
def vendors(ctx: typer.Context, vendor_id: str = typer.Argument(..., metavar="VENDORID", help="The ELS id of the vendor")):
    ctx.obj = ctx.obj.withScope(vendorId=vendor_id)


@vendorsApp.command("put")
def vendorPut(
    ctx: typer.Context,
    src: str | None = typer.Argument(None, metavar="[SRC]", help="The file containing the JSON defining the vendor"),
):
    """Update or Create a vendor"""
    callApi(ctx, "vendor-put", RequestSpec.put(f"/vendors/{ctx.obj.scope['vendorId']}", src))


@vendorsApp.command("get")
def vendorGet(ctx: typer.Context):
    """Get details about a vendor"""
    callApi(ctx, "vendor-get", RequestSpec.get(f"/vendors/{ctx.obj.scope['vendorId']}"))


@vendorsApp.command("list-rulesets")
def vendorListRulesets(ctx: typer.Context):
    """List all the Pricing Rulesets"""
    callApi(ctx, "list-rulesets", RequestSpec.get(f"/vendors/{ctx.obj.scope['vendorId']}/paygRuleSets"))


@vendorsApp.command("get-eula-license-infringements")
def vendorInfringements(
    ctx: typer.Context,
    year: int | None = typer.Argument(None, metavar="[YEAR]", help="The Year of the report (e.g. 2018)"),
    month: int | None = typer.Argument(
        None, metavar="[MONTH]", help="The month of the report as an integer (where January = 1)"
    ),
):
    """Create a report containing details of Customer Licence EULA Infringements"""
    today = date.today()
    reportYear = year if year is not None else today.year
    reportMonth = month if month is not None else today.month

    def execute(appCtx: AppContext) -> None:
        with createClient(appCtx) as client:
            usecase = InfringementReportUseCase(
                ElsRequestExecutor(client, InputResolver()),
                logger=appCtx.logger,
                run_id=appCtx.runId,
            )
            usecase.export(appCtx.scope["vendorId"], reportYear, reportMonth, sys.stdout)

    runCommand(ctx, "get-eula-license-infringements", execute)


@rulesetsApp.callback()
def rulesets(ctx: typer.Context, ruleset_id: str = typer.Argument(..., metavar="RULESETID", help="The ID of the ruleset")):
    ctx.obj = ctx.obj.withScope(rulesetId=ruleset_id)


def _rulesetPath(appCtx: AppContext) -> str:
    return f"/vendors/{appCtx.scope['vendorId']}/paygRuleSets/{appCtx.scope['rulesetId']}"


@rulesetsApp.command("put")
def rulesetPut(
    ctx: typer.Context,
    src: str | None = typer.Argument(None, metavar="[SRC]", help="The file containing the JSON defining the ruleset"),
):
    """Create or update a Pricing Ruleset - note you cannot update an activated (live) Ruleset."""
    callApi(ctx, "ruleset-put", RequestSpec.put(_rulesetPath(ctx.obj), src))


@rulesetsApp.command("get")
def rulesetGet(ctx: typer.Context):
    """Get a specific Pricing Ruleset"""
    callApi(ctx, "ruleset-get", RequestSpec.get(_rulesetPath(ctx.obj)))


@rulesetsApp.command("activate")
def rulesetActivate(ctx: typer.Context):
    """Activate a Pricing Ruleset - i.e. it will be used to generate Fuel Rates

    The request body is optional; nothing piped means an empty PATCH.
    """
    callApi(ctx, "ruleset-activate", RequestSpec.patch(_rulesetPath(ctx.obj) + "/activate"))


# cloud providers


@cloudProvidersApp.callback()
def cloudProviders(
    ctx: typer.Context,
    cloud_provider_id: str = typer.Argument(..., metavar="CLOUDPROVIDERID", help="The ELS id of the cloud provider"),
):
    ctx.obj = ctx.obj.withScope(cloudProviderId=cloud_provider_id)


@cloudProvidersApp.command("put")
def cloudProviderPut(
    ctx: typer.Context,
    src: str | None = typer.Argument(
        None, metavar="[SRC]", help="The file containing the JSON defining the cloud provider"
    ),
):
    """Update or Create a cloud provider"""
    callApi(ctx, "cloud-provider-put", RequestSpec.put(f"/partners/{ctx.obj.scope['cloudProviderId']}", src))


@cloudProvidersApp.command("get")
def cloudProviderGet(ctx: typer.Context):
    """Get details about a cloud provider"""
    callApi(ctx, "cloud-provider-get", RequestSpec.get(f"/partners/{ctx.obj.scope['cloudProviderId']}"))


# generic calls


@doApp.command("GET")
def doGet(ctx: typer.Context, url: str = typer.Argument(..., metavar="URL", help=URL_HELP)):
    """Get a resource"""
    callApi(ctx, "do-get", RequestSpec.get(url))


@doApp.command("PUT")
def doPut(
    ctx: typer.Context,
    url: str = typer.Argument(..., metavar="URL", help=URL_HELP),
    content: str | None = typer.Argument(None, metavar="[CONTENT]", help=CONTENT_HELP),
):
    """Update or Create a resource"""
    callApi(ctx, "do-put", RequestSpec.put(url, content))


@doApp.command("POST")
def doPost(
    ctx: typer.Context,
    url: str = typer.Argument(..., metavar="URL", help=URL_HELP),
    content: str | None = typer.Argument(None, metavar="[CONTENT]", help=CONTENT_HELP),
):
    """Post a resource"""
    callApi(ctx, "do-post", RequestSpec.post(url, content))


@doApp.command("PATCH")
def doPatch(
    ctx: typer.Context,
    url: str = typer.Argument(..., metavar="URL", help=URL_HELP),
    content: str | None = typer.Argument(None, metavar="[CONTENT]", help=CONTENT_HELP),
):
    """Patch a resource

    CONTENT is optional. If a CONTENT file is named but cannot be read, the call fails without being sent.
    """
    callApi(ctx, "do-patch", RequestSpec.patch(url, content))


@doApp.command("DELETE")
def doDelete(ctx: typer.Context, url: str = typer.Argument(..., metavar="URL", help=URL_HELP)):
    """Delete a resource"""
    callApi(ctx, "do-delete", RequestSpec.delete(url))


usersApp.add_typer(accessKeysApp, name="access-keys", help="Manage Access Keys")
vendorsApp.add_typer(rulesetsApp, name="rulesets", help="Manage Pricing Rulesets - used to generate pricing for Fuel.")
app.add_typer(usersApp, name="users", help="User API")
app.add_typer(vendorsApp, name="vendors", help="Vendor API")
app.add_typer(cloudProvidersApp, name="cloud-providers", help="Cloud Provider API")
app.add_typer(doApp, name="do", help="Make any call to the API")


def run() -> None:
    app(prog_name="els-cli")

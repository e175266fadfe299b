from __future__ import annotations

import importlib
import sys
import types
import typing as t
from pathlib import Path

import pydantic as p

import keepsake
import keepsake.lib.cli as click
from keepsake.core import KeepsakeContainer
from keepsake.model import DeploymentEnvironment
from keepsake.sync import KeepsakeError

_KeepsakeRoot = Path(keepsake.__file__).resolve().parents[1]

# command name -> short help; modules are imported only when a command runs
Commands: dict[str, str] = {
    "videos": "Browse the gallery and upload videos.",
}

_wiring: list[types.ModuleType] = []


class KeepsakeMultiCommand(click.Group):
    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(Commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in Commands:
            return None
        mod = importlib.import_module(f"keepsake.cli.{cmd_name}")
        _wiring.append(mod)
        command = getattr(mod, cmd_name)
        command.short_help = Commands[cmd_name]
        return command


@click.group(cls=KeepsakeMultiCommand)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=_KeepsakeRoot / "config", type=click.URIParamType(dir_ok=True))
@click.option(
    "-u",
    "--service-url",
    default=None,
    help="talk to the video service at this URL instead of the local store",
)
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="configuration path parameter-value pairs to override config with, e.g., -o sync.upload.chunk_size=65536",
)
@click.option("-D", "--debug", is_flag=True, default=False)
@click.pass_obj
def main(
    ct: KeepsakeContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    service_url: str | None,
    override: tuple[str, ...],
    debug: bool,
):
    """Keep and share your family's videos."""
    if service_url is not None:
        # explicit -o values still win, they are applied after these
        override = ("sync.actor.backend=http", f"sync.actor.base_url={service_url}", *override)
    KeepsakeContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        override=override,
        wiring=tuple(_wiring),
    )


def execute_command(*_args: str) -> None:
    args = list(_args or sys.argv)

    # Strip away full path to fix program name in help message
    args[0] = Path(args[0]).name
    debug = "-D" in args[1:] or "--debug" in args[1:]
    container = KeepsakeContainer()

    try:
        with main.make_context(args[0], args=args[1:]) as ctx:
            ctx.obj = container
            rs = t.cast(int, main.invoke(ctx))
            sys.exit(rs)
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", file=sys.stderr)
        sys.exit(1)
    except click.exceptions.Exit:
        sys.exit(0)
    except KeepsakeError as ex:
        # already logged where it was raised
        click.echo(click.style("ERROR ", fg="red"), nl=False, file=sys.stderr)
        click.echo(str(ex), file=sys.stderr)
        sys.exit(1)
    except Exception as ex:
        click.echo(click.style("ERROR ", fg="red"), nl=False, file=sys.stderr)
        click.echo(str(ex), file=sys.stderr)

        if debug:
            import traceback

            traceback.print_exc()
        if isinstance(ex, click.ClickException):
            sys.exit(ex.exit_code)
        sys.exit(-1)
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    execute_command(*sys.argv)

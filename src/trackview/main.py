import click
import logging
import yaml
from .app import AppContext
from .config import load_config
from .version import __version__

LOG_FORMAT = "[%(levelname)s] %(message)s"

from dotenv import load_dotenv

load_dotenv()


def register_commands(cli):
    from .commands.status import status, files

    cli.add_command(status)
    cli.add_command(files)


@click.group()
@click.pass_obj
@click.option(
    "--repo-path",
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
    default=".",
    help="Path to the git repository",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the config file (default: .trackview.yaml or $TRACKVIEW_CONFIG)",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.version_option(__version__, prog_name="trackview")
def cli(app: AppContext, repo_path: str, config_path: str, verbose: int):
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG if verbose > 1 else logging.INFO)

    app.repo_path = repo_path
    try:
        app.config = load_config(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))


register_commands(cli)


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
    )
    cli(obj=AppContext())


if __name__ == "__main__":
    main()

"""Command-line resolution into an immutable BuildConfig."""

from collections.abc import Sequence

from kyuubi_dist.core.exceptions.errors import HelpRequested, UsageError
from kyuubi_dist.models.config import BuildConfig, ProvidedComponent

USAGE = """\
Usage:
  kyuubi-dist [--name <custom_name>] [--tgz] [--web-ui] [--flink-provided]
              [--spark-provided] [--hive-provided] [--mvn <maven_executable>]
              <maven build options>

  --name            custom binary name, the Spark version is used if undefined
  --tgz             also make a compressed .tgz package
  --web-ui          include the web UI
  --flink-provided  do not bundle the Flink binary
  --spark-provided  do not bundle the Spark binary
  --hive-provided   do not bundle the Hive binary
  --mvn             Maven executable, defaults to build/mvn under the project root
  --help            show this message and exit

Maven build options start at the first token with a single leading dash,
e.g. -Pspark-3.5 -Dhadoop.version=3.3.6; every following token is forwarded
to Maven verbatim.
"""

_PROVIDED_FLAGS = {component.flag: component for component in ProvidedComponent}
_VALUED = {"--mvn", "--name"}


def resolve_config(tokens: Sequence[str], default_orchestrator: str) -> BuildConfig:
    """Parse command-line tokens into a BuildConfig.

    Flags are consumed left to right. The first token that starts with a
    single dash and is not a known flag ends flag parsing; it and all later
    tokens are kept, in order, as Maven pass-through arguments.

    Args:
        tokens: Command-line tokens, without the program name.
        default_orchestrator: Maven executable used when --mvn is absent.

    Returns:
        The resolved configuration.

    Raises:
        HelpRequested: If --help was given.
        UsageError: On an unknown flag, a stray token or a missing value.
    """
    make_archive = False
    enable_web_ui = False
    provided: set[ProvidedComponent] = set()
    orchestrator = default_orchestrator
    custom_name: str | None = None
    passthrough: tuple[str, ...] = ()

    index = 0
    while index < len(tokens):
        token = tokens[index]

        if token == "--help":
            raise HelpRequested()
        elif token == "--tgz":
            make_archive = True
        elif token == "--web-ui":
            enable_web_ui = True
        elif token in _PROVIDED_FLAGS:
            provided.add(_PROVIDED_FLAGS[token])
        elif token in _VALUED:
            if index + 1 >= len(tokens):
                raise UsageError(f"Error: {token} requires a value", token=token)
            value = tokens[index + 1]
            if token == "--mvn":
                orchestrator = value
            else:
                custom_name = value
            index += 1
        elif token.startswith("--"):
            raise UsageError(f"Error: {token} is not supported", token=token)
        elif token.startswith("-"):
            passthrough = tuple(tokens[index:])
            break
        else:
            raise UsageError(f"Error: {token} is not supported", token=token)

        index += 1

    return BuildConfig(
        custom_name=custom_name,
        make_archive=make_archive,
        enable_web_ui=enable_web_ui,
        provided=frozenset(provided),
        orchestrator_path=orchestrator,
        passthrough_args=passthrough,
    )

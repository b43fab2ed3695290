from typing import Dict, Sequence, Union

LONG_OPTION_PREFIX = "--"

RawArgs = Dict[str, Union[str, bool]]


def parse_args(argv: Sequence[str]) -> RawArgs:
    """
    Collect ``--key value``, ``--key=value`` and bare ``--flag`` options into a dict.

    Tokens without the ``--`` prefix are skipped and a repeated key keeps its last
    value. Parsing never fails.

    Args:
        argv (Sequence[str]): Command line tokens, without the program name.

    Returns:
        RawArgs: Option name to string value, or True for flags.
    """
    result: RawArgs = {}
    i = 0
    while i < len(argv):
        entry = argv[i]
        i += 1
        if not entry.startswith(LONG_OPTION_PREFIX):
            continue

        entry = entry[len(LONG_OPTION_PREFIX):]

        if "=" in entry:
            key, value = entry.split("=", 1)
            result[key] = value
            continue

        following = argv[i] if i < len(argv) else None
        if following and not following.startswith(LONG_OPTION_PREFIX):
            result[entry] = following
            i += 1
        else:
            result[entry] = True

    return result

"""
Clad tokenizer: rewrite raw command-line tokens into a canonical stream.

Canonical form
- every flag is its own token ("-abc" becomes "-a", "-b", "-c").
- "=" joined values are split ("--out=x" becomes "--out", "x"; "-o=x" becomes "-o", "x").
- a flag that takes a value is immediately followed by it ("-ox" becomes "-o", "x";
  "--out x" stays "--out", "x"), unless the input ran out.
- a raw "--" token and everything after it is copied verbatim.

Whether an alias takes a value is looked up in two mappings (short aliases and
long aliases, de-hyphenated, to bool). Unknown aliases are treated as flags
without a value and left for the matcher to reject.

Only a raw "--" separates flags from literal values. The canonical stream can
hold other "--" tokens ("-v-" becomes "-v", "--"; "--=x" becomes "--", "x"),
so the position of the separator is returned alongside the tokens.
"""
from collections import deque


def preprocess(tokens, shorts, longs, /):
    """
    Return the canonical form of `tokens` as a new list, plus the index of the
    literal separator in that list (None when there is none).

    parameters
    - tokens: Iterable[str]
      raw tokens (e.g., sys.argv[1:]).
    - shorts: Mapping[str, bool]
      single-character alias -> whether it takes a value.
    - longs: Mapping[str, bool]
      multi-character alias -> whether it takes a value.

    examples
    - ["-vvo", "out.txt"]     -> (["-v", "-v", "-o", "out.txt"], None)   (o takes a value)
    - ["-ofile"]              -> (["-o", "file"], None)
    - ["--out=a=b"]           -> (["--out", "a=b"], None)
    - ["-v", "--", "-v"]      -> (["-v", "--", "-v"], 1)
    - ["-v-"]                 -> (["-v", "--"], None)
    """
    processed = []
    separator = None
    queue = deque(tokens)

    while queue:
        token = queue.popleft()

        if token == "--":
            # no flag interpretation from here on
            separator = len(processed)
            processed.append(token)
            processed.extend(queue)
            break

        if token.startswith("--"):
            name, equals, value = token.partition("=")
            if equals:
                processed.extend((name, value))
                continue
            processed.append(token)
            if longs.get(token[2:]) and queue:
                processed.append(queue.popleft())

        elif token.startswith("-") and len(token) > 1:
            for index, char in enumerate(token[1:], 1):
                processed.append("-" + char)
                if not shorts.get(char):
                    continue
                rest = token[index + 1:]
                if not rest:
                    if queue:
                        processed.append(queue.popleft())
                else:
                    processed.append(rest.removeprefix("="))
                break

        else:
            processed.append(token)

    return processed, separator


__all__ = (
    "preprocess",
)

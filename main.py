from rich.pretty import pprint

from clad import *

concat = Command({
    "sep": Argument("s", "sep", "separator", default="-", help="The separator used to concatenate words"),
    "cap": Argument("c", "capitalize", help="Make each word all caps"),
    "low": Argument("l", "low", "lowercase", conflicts=["cap"], help="Make each word lowercase"),
    "words": Argument(multi=True, required=True, help="Any number of words to join"),
}, "concat", "Concatenate words with a separator", "0.1.0")


if __name__ == '__main__':
    matches = concat.parse()
    pprint(matches)
    words = matches.unwrap("words")
    if matches.unwrap("low"):
        words = [word.lower() for word in words]
    elif matches.unwrap("cap"):
        words = [word.upper() for word in words]
    print(matches.unwrap("sep").join(words))

from rich.pretty import pprint

from argot import *

__prog__ = "demo"


@command("greet", "say hello to someone")
def greet(output, args):
    for _ in range(args["times"]):
        output.out(f"{'hey' if args['loud'] else 'hello'} {args['name']}\n")


greet.add_argument("name", Arity.REQUIRED, ValueType.STRING, descr="who to greet")
greet.add_option("times", ("t", "times"), OptionArity.VALUE_OPTIONAL, ValueType.INTEGER, 1, "how many times")
greet.add_option("loud", ("l", "loud"), OptionArity.VALUE_OPTIONAL, ValueType.BOOLEAN, False, "shout")


if __name__ == '__main__':
    pprint(greet)
    raise SystemExit(invoke(greet))

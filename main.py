import sys

from rich.pretty import pprint

from optionist import *


verbose = BoolOption("v", "verbose", descr="talk more")
count = IntOption("n", "count", arity=Arity.REQUIRED, descr="how many rounds").check(lambda value: value > 0)
ratio = FloatOption("r", "ratio", arity=Arity.OPTIONAL, descr="sampling ratio").default(0.5)
name = StrOption("name", descr="who to greet")


if __name__ == '__main__':
    pprint(parse(sys.argv, verbose, count, ratio, name, shell=True, fancy=True, colorful=True))

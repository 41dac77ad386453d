from rich.pretty import pprint

from argbinder import *

scope = Scope("main", "bind a few options and show what was left over", shell=True)
output = scope.string("o", "out", required=True, descr="where to write")
mode = scope.selector("m", "mode", choices=("fast", "safe"), descr="how hard to try")
tags = scope.list("t", "tag", descr="repeatable tag")
verbose = scope.flag("v", "verbose", descr="talk more")


if __name__ == '__main__':
    leftovers = scope.parse()
    pprint(scope)
    pprint({"out": output.value, "mode": mode.value, "tags": tags.value, "verbose": verbose.value, "leftovers": leftovers})

from rich.pretty import pprint

from optstanza import *

spec = options("""\
cat - concatenate files to standard output
Usage: cat [OPTIONS] file...
Fancifully, you can say "-r 3" and have everything told you three times.
--
n,numerate,number     number input lines
e,escape              escape nonprintable characters
i,input-encoding=     charset input is encoded in [utf-8]
o,output-encoding=    charset output is encoded in [utf-8]
r,repeat=             repeat every line some number of times [1]
v,verbose             be verbose
h,help                show this help
author=               authors you like (may be repeated)""")


if __name__ == '__main__':
    opt = spec.parse()
    if opt.getbool("help"):
        spec.print_usage_and_exit()
    pprint(opt)
    pprint(dict(
        files=opt.extra,
        repeat=opt.getint("repeat"),
        verbose=opt.getint("verbose"),
        authors=getall("--author", opt.flags),
    ))

from dbrestore.dump.assembler import StatementAssembler, iter_statements
from dbrestore.dump.reader import DumpReader

__all__ = ["DumpReader", "StatementAssembler", "iter_statements"]

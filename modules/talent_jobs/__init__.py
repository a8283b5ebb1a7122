# Keep this TINY so importing the package stays cheap.
from . import lib  # so: from modules.talent_jobs import lib
from .main import run  # so: from modules.talent_jobs import run

__all__ = ["lib", "run"]

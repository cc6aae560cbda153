"""octl — Microsoft Outlook mail and calendar from the terminal.

Built on the Microsoft Graph SDK and azure-identity with a strict
layered architecture (cli → core → infra).
"""

from octl.version import __version__

__all__: list[str] = ["__version__"]

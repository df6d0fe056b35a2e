"""Catalogue des commandes d'administration Linux courantes.

Chaque entrée du catalogue fixe le chemin absolu de l'exécutable et
expose des méthodes d'option chaînables. Les variantes ne portent
aucune logique : elles délèguent à un CommandBuilder partagé.

Example:
    Recherche de processus java hors grep lui-même :

        from dr_command_toolkit.commands import catalog

        cmd = (
            catalog.ps().all().full_format()
            .pipe(catalog.grep().exclude_self())
            .pipe(catalog.grep().ignore_case().add("java"))
        )
"""

import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

from dr_command_toolkit.commands.base import Command
from dr_command_toolkit.commands.builder import CommandBuilder
from dr_command_toolkit.errors.exceptions import (
    CommandError,
    CredentialPreparationError,
)

SIGKILL = 9


class CatalogCommand:
    """Base des commandes du catalogue.

    Attributes:
        EXECUTABLE: Chemin absolu de l'exécutable, premier jeton.
        _builder: Accumulateur partagé de jetons et d'exports.
    """

    EXECUTABLE = ""

    def __init__(self, *args: Any) -> None:
        self._builder = CommandBuilder(self.EXECUTABLE, *args)

    def add(self, *tokens: Any):
        self._builder.add(*tokens)
        return self

    def add_with_equal(self, key: str, value: Any):
        self._builder.add_with_equal(key, value)
        return self

    def export(self, key: str, value: Any):
        self._builder.export(key, value)
        return self

    def pipe(self, command: Any):
        self._builder.pipe(command)
        return self

    def build(self) -> Command:
        return self._builder.build()

    def as_list(self) -> List[str]:
        return self._builder.as_list()

    def as_string(self) -> str:
        return self._builder.as_string()

    def __str__(self) -> str:
        return self.as_string()


class Awk(CatalogCommand):
    EXECUTABLE = "/usr/bin/awk"

    def pattern(self, pattern: str) -> "Awk":
        return self.add(pattern)


class Bash(CatalogCommand):
    EXECUTABLE = "/usr/bin/bash"

    def command(self, command: str) -> "Bash":
        """Ajoute ``-c '<command>'`` en un seul jeton."""
        return self.add(f"-c '{command}'")


class Cat(CatalogCommand):
    EXECUTABLE = "/usr/bin/cat"

    def pipe_to_file(self, file: str, content: str) -> "Cat":
        """Écrit content dans file via un here-document.

        Le contenu doit se terminer par un saut de ligne pour que
        le marqueur EOF soit reconnu par le shell distant.
        """
        return self.add(f"<<EOF > {file}\n{content}EOF")


class Df(CatalogCommand):
    EXECUTABLE = "/bin/df"

    def human_readable(self) -> "Df":
        return self.add("-h")


class Echo(CatalogCommand):
    EXECUTABLE = "/usr/bin/echo"

    def content(self, content: str) -> "Echo":
        return self.add(content)

    def pipe_to_command(self, command: str) -> "Echo":
        return self.add(f"| {command}")


class Grep(CatalogCommand):
    EXECUTABLE = "/usr/bin/grep"

    def exclude_self(self) -> "Grep":
        """Exclut la ligne de grep lui-même (usage avec ps)."""
        return self.invert_match("grep")

    def ignore_case(self) -> "Grep":
        return self.add("--ignore-case")

    def invert_match(self, match: str) -> "Grep":
        return self.add("--invert-match", match)

    def regex(self, regex: str) -> "Grep":
        return self.add("--perl-regexp", regex)


class Hostname(CatalogCommand):
    EXECUTABLE = "/usr/bin/hostname"

    def name(self, name: str) -> "Hostname":
        return self.add(name)


class Kill(CatalogCommand):
    EXECUTABLE = "/usr/bin/kill"

    def signal(self, signal: int) -> "Kill":
        return self.add(f"-{signal}")

    def kill(self) -> "Kill":
        """Sélectionne SIGKILL (-9)."""
        return self.signal(SIGKILL)


class Ls(CatalogCommand):
    EXECUTABLE = "/usr/bin/ls"


class Mkdir(CatalogCommand):
    EXECUTABLE = "/usr/bin/mkdir"


class Ps(CatalogCommand):
    EXECUTABLE = "/usr/bin/ps"

    def all(self) -> "Ps":
        return self.add("-A")

    def full_format(self) -> "Ps":
        return self.add("-f")


class Rm(CatalogCommand):
    EXECUTABLE = "/usr/bin/rm"

    def force(self) -> "Rm":
        return self.add("-f")

    def file(self, file: str) -> "Rm":
        return self.add(file)

    def folder(self, folder: str) -> "Rm":
        """Suppression récursive d'un répertoire."""
        return self.add("-r", folder)


class Ssh(CatalogCommand):
    """Commande ssh.

    Les fichiers de clé écrits par private_key() sont suivis dans
    identity_files ; leur suppression revient à l'appelant via
    discard_identity_files().
    """

    EXECUTABLE = "/usr/bin/ssh"

    def __init__(self) -> None:
        super().__init__()
        self.identity_files: List[str] = []

    def host(self, user_or_host: str, host: Optional[str] = None) -> "Ssh":
        """Ajoute la cible ``host`` ou ``user@host``."""
        if host is None:
            return self.add(user_or_host)
        return self.add(f"{user_or_host}@{host}")

    def identity(self, file: str) -> "Ssh":
        return self.add("-i", file)

    def private_key(self, key: str) -> "Ssh":
        """Matérialise la clé dans un fichier temporaire et l'utilise.

        Le fichier est créé à chaque appel (mode 0600, suffixe .key,
        encodage ASCII).

        Raises:
            CredentialPreparationError: Si le fichier ne peut pas
                être écrit.
        """
        try:
            data = key.encode("ascii")
            fd, path = tempfile.mkstemp(suffix=".key")
        except (OSError, UnicodeEncodeError) as e:
            raise CredentialPreparationError(
                f"Impossible de préparer le fichier d'identité ssh : {e}"
            ) from e
        self.identity_files.append(path)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            self.discard_identity_files()
            raise CredentialPreparationError(
                f"Impossible d'écrire le fichier d'identité ssh : {e}"
            ) from e
        return self.identity(path)

    def discard_identity_files(self) -> None:
        """Supprime les fichiers de clé créés par private_key()."""
        while self.identity_files:
            path = self.identity_files.pop()
            try:
                os.remove(path)
            except FileNotFoundError:
                pass

    def tty(self) -> "Ssh":
        """Force l'allocation d'un pseudo-terminal."""
        return self.add("-tt")

    def command(self, command: Any) -> "Ssh":
        return self.add(command.as_string())

    def no_key_checking(self) -> "Ssh":
        return self.add_with_equal("-oStrictHostKeyChecking", "no")

    def null_host_file(self) -> "Ssh":
        return self.add_with_equal("-oUserKnownHostsFile", "/dev/null")

    def timeout(self, seconds: int) -> "Ssh":
        return self.add_with_equal("-oConnectTimeout", seconds)


class Sudo(CatalogCommand):
    EXECUTABLE = "/usr/bin/sudo"

    def command(self, command: Any) -> "Sudo":
        return self.add(command.as_string())


class Tar(CatalogCommand):
    EXECUTABLE = "/usr/bin/tar"

    def compress_file(self, target: str, file: str) -> "Tar":
        return self.add("cvzf", target).add(file)

    def extract_file(self, file: str, directory: str) -> "Tar":
        return self.add("xvzf", file).add_with_equal(
            "--directory", directory
        )


class Xargs(CatalogCommand):
    EXECUTABLE = "/usr/bin/xargs"

    def command(self, command: Any) -> "Xargs":
        return self.add(command.as_string())


def awk() -> Awk:
    return Awk()


def bash() -> Bash:
    return Bash()


def cat() -> Cat:
    return Cat()


def df() -> Df:
    return Df()


def echo() -> Echo:
    return Echo()


def grep() -> Grep:
    return Grep()


def hostname() -> Hostname:
    return Hostname()


def kill() -> Kill:
    return Kill()


def ls(directory: str) -> Ls:
    return Ls(directory)


def mkdir(directory: str) -> Mkdir:
    return Mkdir(directory)


def ps() -> Ps:
    return Ps()


def rm() -> Rm:
    return Rm()


def ssh() -> Ssh:
    return Ssh()


def sudo() -> Sudo:
    return Sudo()


def tar() -> Tar:
    return Tar()


def xargs() -> Xargs:
    return Xargs()


CATALOG: Dict[str, Callable[..., CatalogCommand]] = {
    "awk": awk,
    "bash": bash,
    "cat": cat,
    "df": df,
    "echo": echo,
    "grep": grep,
    "hostname": hostname,
    "kill": kill,
    "ls": ls,
    "mkdir": mkdir,
    "ps": ps,
    "rm": rm,
    "ssh": ssh,
    "sudo": sudo,
    "tar": tar,
    "xargs": xargs,
}


def create(name: str, *args: Any) -> CatalogCommand:
    """Crée une commande du catalogue par son nom.

    Args:
        name: Nom de la commande (ex: "grep").
        *args: Arguments du constructeur (ex: répertoire pour ls).

    Raises:
        CommandError: Si le nom est inconnu.
    """
    try:
        factory = CATALOG[name]
    except KeyError:
        raise CommandError(
            f"Commande inconnue : {name!r}. "
            f"Disponibles : {sorted(CATALOG)}"
        ) from None
    return factory(*args)

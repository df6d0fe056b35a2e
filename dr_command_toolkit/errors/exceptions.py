"""
Exceptions métier de dr_command_toolkit.

Toutes les exceptions héritent de ApplicationError afin que l'appelant
puisse distinguer les erreurs connues du toolkit des erreurs inattendues.

Les échecs de lancement de processus et les interruptions ne sont jamais
levés : ils sont rendus sous forme d'ExecutionResult en échec.
"""


class ApplicationError(Exception):
    """Exception de base pour tout le toolkit."""
    pass


class ConfigurationError(ApplicationError):
    """Exception de base pour toutes les configurations."""
    pass


class FileConfigurationError(ConfigurationError):
    """Fichier de configuration illisible ou invalide."""
    pass


class CommandError(ApplicationError):
    """Exception de base pour la construction des commandes."""
    pass


class CommandFrozenError(CommandError):
    """Levée quand on modifie une commande déjà lue."""
    pass


class CredentialPreparationError(ApplicationError):
    """Levée quand le fichier de clé privée ne peut pas être écrit.

    Fatale : surfacée immédiatement à la construction de la commande ssh.
    """
    pass


class AssuranceError(ApplicationError):
    """Levée quand assure() a épuisé toutes ses tentatives.

    Irrécupérable au point d'appel : elle doit terminer le workflow.
    """
    pass


class ExecutorShutdownError(ApplicationError):
    """Levée quand on soumet une commande à un exécuteur arrêté."""
    pass

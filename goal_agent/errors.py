"""Failures reported by the external collaborators a goal talks to."""


class CollaboratorError(RuntimeError):
    """Base class for transport, retrieval, classification and scheduling failures."""


class ReplySourceError(CollaboratorError):
    pass


class SendError(CollaboratorError):
    pass


class ClassifierError(CollaboratorError):
    pass


class InviteError(CollaboratorError):
    pass

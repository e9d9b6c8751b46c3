from .agent import Agent
from .email import Email
from .message import Message, MessageDirection
from .user import User
from .wallet import ExternalWallet, Wallet

__all__ = ["Agent", "Email", "ExternalWallet", "Message", "MessageDirection", "User", "Wallet"]

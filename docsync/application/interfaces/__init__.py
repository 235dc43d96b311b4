"""Application ports: data driver and notifier protocols."""

from docsync.application.interfaces.driver import DriverResult, IDataDriver
from docsync.application.interfaces.notifier import INotifier

__all__ = ["DriverResult", "IDataDriver", "INotifier"]

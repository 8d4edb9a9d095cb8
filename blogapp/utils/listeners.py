import logging

logger = logging.getLogger(__name__)


class ListenerSet:
    """Lista de callbacks con desuscripción.

    add() devuelve una función que quita el callback; llamarla más de una
    vez no hace nada.
    """

    def __init__(self, name="listeners"):
        self.name = name
        self._callbacks = []

    def add(self, callback):
        self._callbacks.append(callback)
        removed = False

        def dispose():
            nonlocal removed
            if removed:
                return
            removed = True
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return dispose

    def notify(self, *args):
        # Copia: un callback puede desuscribirse mientras notificamos
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception:
                logger.exception("Error en listener de %s", self.name)

    def clear(self):
        self._callbacks.clear()


# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para acceso a archivos JSON
# ==============================================================================

import json
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from lanches_pos.errors import PersistenceError
from lanches_pos.logger import log_error, log_warning


class BaseRepository(ABC):
    """
    Clase base abstracta para todos los repositorios.
    Lectura/escritura de archivos JSON con un lock compartido por todos
    los repositorios del proceso.

    Cualquier falla de lectura o escritura se convierte en PersistenceError;
    los servicios la traducen a {'ok': False} sin tocar el estado en memoria.

    Si se pasa un notifier, cada escritura publica el evento `channel`
    (ver lanches_pos.state.ChangeNotifier).
    """

    # Lock global: números de pedido y apertura/cierre de caja se deciden adentro
    _file_lock = threading.RLock()

    channel = 'data'

    def __init__(self, file_path: str, notifier=None):
        """
        Args:
            file_path: Ruta absoluta al archivo JSON de datos
            notifier: Publicador de eventos de cambio (opcional)
        """
        self.file_path = file_path
        self.notifier = notifier
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con datos vacíos si no existe."""
        with self._file_lock:
            if not os.path.exists(self.file_path):
                try:
                    os.makedirs(os.path.dirname(self.file_path), exist_ok=True)
                except OSError as e:
                    raise PersistenceError(f"No se pudo crear la carpeta de datos: {e}") from e
                self._write_raw(self._empty_data(), notify=False)

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura vacía (dict, list, etc.) según el repositorio."""
        pass

    @contextmanager
    def locked(self):
        """
        Sección crítica sobre el almacenamiento.
        Uso:
            with repo.locked():
                ... leer, decidir, escribir ...
        """
        with self._file_lock:
            yield

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados (estructura vacía si el archivo no existe)

        Raises:
            PersistenceError: JSON corrupto o error de lectura
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except FileNotFoundError:
                return self._empty_data()
            except (json.JSONDecodeError, OSError) as e:
                log_error(f"Error leyendo {os.path.basename(self.file_path)}", e)
                raise PersistenceError(f"Almacenamiento ilegible: {os.path.basename(self.file_path)}") from e

    def _write_raw(self, data: Any, notify: bool = True) -> None:
        """
        Escribe datos al archivo JSON (temporal + os.replace).

        Raises:
            PersistenceError: Si no se pudo escribir
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except (OSError, TypeError, ValueError) as e:
                # Limpiar archivo temporal si algo falla
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                log_error(f"Error escribiendo {os.path.basename(self.file_path)}", e)
                raise PersistenceError(f"No se pudo guardar: {os.path.basename(self.file_path)}") from e
        if notify:
            self._notify()

    def _notify(self) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.publish(self.channel)
        except Exception as e:
            # Un suscriptor roto no invalida una escritura ya confirmada
            log_warning(f"Suscriptor de '{self.channel}' falló: {e}")

    def reload(self) -> None:
        """Las implementaciones JSON no tienen caché; existe por la interfaz."""
        pass


class DictRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como diccionario.

    Ejemplo: store_settings.json -> {"name": ..., "neighborhoods": [...]}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def save_all(self, data: Dict[str, Any]) -> None:
        self._write_raw(data)

    def update(self, key: str, value: Any) -> None:
        with self._file_lock:
            data = self.get_all()
            data[key] = value
            self._write_raw(data)


class ListRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como lista.

    Ejemplo: orders.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Busca un registro por un campo específico.

        Returns:
            Primer registro que coincide o None
        """
        for record in self.get_all():
            if record.get(field) == value:
                return record
        return None

    def update_where(self, field: str, value: Any, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Actualiza el registro cuyo `field` coincide con `value`.

        Returns:
            El registro actualizado o None si no existe
        """
        with self._file_lock:
            data = self.get_all()
            for record in data:
                if record.get(field) == value:
                    record.update(updates)
                    self._write_raw(data)
                    return record
        return None

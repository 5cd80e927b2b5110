# ==============================================================================
# REPOSITORIO BASE - Almacén clave/valor sobre archivos JSON
# ==============================================================================
# JSONStore es el único recurso compartido de persistencia. Se construye
# una vez (AppContainer) y se pasa por referencia a todos los repositorios.
#
# Cada registro con nombre (pos_products, pos_sales, pos_currency) vive en
# su propio archivo <clave>.json dentro del directorio de datos.
# ==============================================================================

import copy
import json
import logging
import os
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List

from pos_ledger.errors import PersistenceError

logger = logging.getLogger(__name__)

_MISSING = object()


class JSONStore:
    """
    Almacén clave/valor persistido en archivos JSON.

    - Escrituras síncronas y atómicas (archivo temporal + os.replace)
    - Lecturas cacheadas en memoria después de la primera carga
    - Lock re-entrante para serializar ciclos leer-modificar-escribir

    Cualquier error de E/S o JSON inválido se propaga como PersistenceError.
    """

    def __init__(self, data_dir: str):
        """
        Args:
            data_dir: Directorio donde se guardan los archivos <clave>.json
        """
        self.data_dir = data_dir
        self._lock = threading.RLock()
        self._cache: Dict[str, Any] = {}
        self._closed = False
        try:
            os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"No se pudo crear el directorio de datos {data_dir}: {e}") from e

    def _path(self, key: str) -> str:
        return os.path.join(self.data_dir, f"{key}.json")

    def _check_open(self) -> None:
        if self._closed:
            raise PersistenceError("El almacén está cerrado")

    @contextmanager
    def locked(self) -> Iterator['JSONStore']:
        """Sección crítica: serializa operaciones leer-modificar-escribir."""
        with self._lock:
            yield self

    def _read_raw(self, key: str) -> Any:
        path = self._path(key)
        if not os.path.exists(path):
            return _MISSING
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Datos corruptos en '{key}': {e}") from e
        except OSError as e:
            raise PersistenceError(f"Error leyendo '{key}': {e}") from e

    def _write_raw(self, key: str, value: Any) -> None:
        path = self._path(key)
        temp_path = path + '.tmp'
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise PersistenceError(f"Error escribiendo '{key}': {e}") from e

    def has(self, key: str) -> bool:
        """Verifica si el registro existe (en caché o en disco)."""
        with self._lock:
            self._check_open()
            if key in self._cache:
                return True
            return os.path.exists(self._path(key))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Obtiene una copia del valor de un registro.

        Args:
            key: Nombre del registro
            default: Valor si el registro no existe

        Returns:
            Copia profunda del valor (mutarla no altera el almacén)
        """
        with self._lock:
            self._check_open()
            if key not in self._cache:
                raw = self._read_raw(key)
                if raw is _MISSING:
                    return default
                self._cache[key] = raw
            return copy.deepcopy(self._cache[key])

    def set(self, key: str, value: Any) -> None:
        """Reemplaza el valor completo y lo escribe a disco antes de retornar."""
        with self._lock:
            self._check_open()
            self._write_raw(key, value)
            self._cache[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        """
        Elimina un registro.

        Returns:
            True si existía
        """
        with self._lock:
            self._check_open()
            self._cache.pop(key, None)
            path = self._path(key)
            if not os.path.exists(path):
                return False
            try:
                os.remove(path)
            except OSError as e:
                raise PersistenceError(f"Error eliminando '{key}': {e}") from e
            return True

    def keys(self) -> List[str]:
        """Lista los registros existentes en disco."""
        with self._lock:
            self._check_open()
            try:
                names = os.listdir(self.data_dir)
            except OSError as e:
                raise PersistenceError(f"Error listando {self.data_dir}: {e}") from e
            return sorted(n[:-5] for n in names if n.endswith('.json'))

    def reload(self) -> None:
        """Descarta la caché; la próxima lectura va a disco."""
        with self._lock:
            self._cache.clear()

    def flush(self) -> None:
        # Las escrituras son síncronas: no hay nada pendiente.
        with self._lock:
            self._check_open()

    def close(self) -> None:
        """Cierra el almacén. Operaciones posteriores lanzan PersistenceError."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._cache.clear()
            logger.debug("Almacén cerrado: %s", self.data_dir)

    @property
    def closed(self) -> bool:
        return self._closed


class IdGenerator:
    """
    Genera ids únicos derivados del tiempo (milisegundos).

    Si dos ids caen en el mismo milisegundo, el segundo se incrementa,
    así que la secuencia es estrictamente creciente dentro del proceso.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, taken: Iterable[str] = ()) -> str:
        """
        Args:
            taken: Ids ya usados que no deben repetirse
        """
        taken = set(taken)
        with self._lock:
            candidate = max(int(self._clock() * 1000), self._last + 1)
            while str(candidate) in taken:
                candidate += 1
            self._last = candidate
            return str(candidate)


class ListRepository:
    """
    Repositorio base para un registro almacenado como lista.

    Ejemplo: pos_sales -> [{...}, {...}]
    """

    KEY: str = ''

    def __init__(self, store: JSONStore):
        self.store = store

    def exists(self) -> bool:
        return self.store.has(self.KEY)

    def get_all(self) -> List[Dict[str, Any]]:
        """
        Obtiene todos los registros.

        Raises:
            PersistenceError: Si el valor persistido no es una lista
        """
        data = self.store.get(self.KEY, [])
        if not isinstance(data, list):
            raise PersistenceError(f"'{self.KEY}' debe ser una lista, se encontró {type(data).__name__}")
        return data

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self.store.set(self.KEY, data)

    def append(self, record: Dict[str, Any]) -> None:
        data = self.get_all()
        data.append(record)
        self.save_all(data)

    def clear(self) -> bool:
        """Elimina el registro completo."""
        return self.store.delete(self.KEY)

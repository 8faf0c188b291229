"""vSphere implementation of the platform session.

Talks to vCenter through pyVmomi: VM disk layouts are read with a
paginated property collector query, datastores are browsed with
SearchDatastoreSubFolders_Task, and files are renamed or deleted
through the FileManager.
"""

import logging
import ssl
from typing import Any

from pyVim.connect import Disconnect, SmartConnect
from pyVim.task import WaitForTask
from pyVmomi import vim, vmodl

from vmsweep.errors import PlatformError
from vmsweep.models.disk import datastore_name_of, normalize_datastore_path, replace_file_name
from vmsweep.platform.base import DatastoreFile, PlatformSession

logger = logging.getLogger(__name__)

# layoutEx file types that belong to a virtual disk chain
_DISK_FILE_TYPES: frozenset[str] = frozenset({"diskDescriptor", "diskExtent"})


class VSphereSession(PlatformSession):
    """Platform session backed by a pyVmomi ServiceInstance.

    Args:
        service_instance: Connected ``vim.ServiceInstance``.
    """

    def __init__(self, service_instance: Any) -> None:
        self._si = service_instance
        self._content = service_instance.RetrieveContent()
        # Datastore managed objects by name, filled by lookups
        self._datastores: dict[str, Any] = {}

    @classmethod
    def connect(
        cls,
        host: str,
        user: str,
        password: str,
        *,
        port: int = 443,
        verify_ssl: bool = True,
    ) -> "VSphereSession":
        """Log in to a vCenter server.

        Args:
            host: vCenter host name or address.
            user: User name.
            password: Password.
            port: HTTPS port.
            verify_ssl: If False, accept self-signed certificates.

        Returns:
            Connected VSphereSession.

        Raises:
            PlatformError: If the login fails.
        """
        context = ssl.create_default_context()
        if not verify_ssl:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        logger.debug("Connecting to %s:%d as %s", host, port, user)
        try:
            si = SmartConnect(host=host, user=user, pwd=password, port=port, sslContext=context)
        except vmodl.MethodFault as e:
            raise PlatformError(f"Login to {host} failed: {e.msg}") from e
        except OSError as e:
            raise PlatformError(f"Cannot connect to {host}: {e}") from e
        return cls(si)

    def close(self) -> None:
        """Log out of vCenter."""
        try:
            Disconnect(self._si)
        except (vmodl.MethodFault, OSError) as e:
            logger.debug("Ignoring error while disconnecting: %s", e)

    def list_vm_disk_paths(self) -> list[str]:
        """Return every disk file referenced by any VM on the vCenter.

        Reads ``layoutEx.file`` for all virtual machines in one paginated
        property collector query and keeps descriptor and extent files,
        so snapshot delta disks count as referenced.

        Raises:
            PlatformError: If the query fails.
        """
        paths: list[str] = []
        try:
            for props in self._collect(vim.VirtualMachine, ["layoutEx.file"]):
                for file_info in props.get("layoutEx.file") or []:
                    if file_info.type in _DISK_FILE_TYPES:
                        paths.append(file_info.name)
        except (vmodl.MethodFault, OSError) as e:
            raise PlatformError(f"Cannot read VM disk layouts: {_fault_message(e)}") from e

        logger.debug("Collected %d disk file references", len(paths))
        return paths

    def list_datastores(self, location: str) -> list[str]:
        """Return the names of the datastores attached to a cluster.

        Raises:
            PlatformError: If the cluster does not exist or cannot be read.
        """
        try:
            cluster = self._find_by_name(vim.ClusterComputeResource, location)
            if cluster is None:
                raise PlatformError(f"Cluster not found: {location}")
            names: list[str] = []
            for datastore in cluster.datastore:
                self._datastores[datastore.name] = datastore
                names.append(datastore.name)
        except (vmodl.MethodFault, OSError) as e:
            raise PlatformError(
                f"Cannot list datastores of {location}: {_fault_message(e)}"
            ) from e
        return names

    def search_datastore(self, datastore: str, pattern: str) -> list[DatastoreFile]:
        """Recursively search a datastore for files matching a pattern.

        Size and modification time are requested but some datastore
        types (NFS in particular) leave them unset.

        Raises:
            PlatformError: If the search task fails.
        """
        try:
            ds = self._get_datastore(datastore)
            spec = vim.HostDatastoreBrowserSearchSpec(
                matchPattern=[pattern],
                details=vim.FileQueryFlags(
                    fileSize=True,
                    fileType=True,
                    modification=True,
                    fileOwner=False,
                ),
            )
            task = ds.browser.SearchDatastoreSubFolders_Task(
                datastorePath=f"[{datastore}]",
                searchSpec=spec,
            )
            WaitForTask(task, si=self._si)
            results = task.info.result or []
        except (vmodl.MethodFault, OSError) as e:
            raise PlatformError(f"Search of datastore {datastore} failed: {_fault_message(e)}") from e

        files: list[DatastoreFile] = []
        for result in results:
            for info in result.file or []:
                files.append(
                    DatastoreFile(
                        folder_path=result.folderPath,
                        file_name=info.path,
                        size_bytes=info.fileSize,
                        modified=info.modification,
                    )
                )
        return files

    def rename_file(self, path: str, new_name: str) -> None:
        """Rename a datastore file within its folder.

        Raises:
            PlatformError: If the move task fails.
        """
        source = normalize_datastore_path(path)
        destination = replace_file_name(source, new_name)
        try:
            datacenter = self._datacenter_of(self._get_datastore(datastore_name_of(source)))
            task = self._content.fileManager.MoveDatastoreFile_Task(
                sourceName=source,
                sourceDatacenter=datacenter,
                destinationName=destination,
                destinationDatacenter=datacenter,
                force=False,
            )
            WaitForTask(task, si=self._si)
        except (vmodl.MethodFault, OSError) as e:
            raise PlatformError(f"Rename of {source} failed: {_fault_message(e)}") from e

    def delete_file(self, path: str) -> None:
        """Delete a datastore file.

        Raises:
            PlatformError: If the delete task fails.
        """
        target = normalize_datastore_path(path)
        try:
            datacenter = self._datacenter_of(self._get_datastore(datastore_name_of(target)))
            task = self._content.fileManager.DeleteDatastoreFile_Task(
                name=target,
                datacenter=datacenter,
            )
            WaitForTask(task, si=self._si)
        except (vmodl.MethodFault, OSError) as e:
            raise PlatformError(f"Delete of {target} failed: {_fault_message(e)}") from e

    def _collect(self, obj_type: Any, path_set: list[str]) -> list[dict[str, Any]]:
        """Retrieve properties of all objects of a type, following page tokens."""
        view = self._content.viewManager.CreateContainerView(
            self._content.rootFolder, [obj_type], True
        )
        collector = self._content.propertyCollector
        try:
            obj_spec = vmodl.query.PropertyCollector.ObjectSpec(
                obj=view,
                skip=True,
                selectSet=[
                    vmodl.query.PropertyCollector.TraversalSpec(
                        name="traverseView",
                        path="view",
                        skip=False,
                        type=view.__class__,
                    )
                ],
            )
            prop_spec = vmodl.query.PropertyCollector.PropertySpec(
                type=obj_type,
                all=False,
                pathSet=path_set,
            )
            filter_spec = vmodl.query.PropertyCollector.FilterSpec(
                objectSet=[obj_spec],
                propSet=[prop_spec],
            )

            results: list[dict[str, Any]] = []
            page = collector.RetrievePropertiesEx(
                specSet=[filter_spec],
                options=vmodl.query.PropertyCollector.RetrieveOptions(),
            )
            while page is not None:
                for obj in page.objects:
                    props: dict[str, Any] = {"obj": obj.obj}
                    for prop in obj.propSet:
                        props[prop.name] = prop.val
                    results.append(props)
                if not page.token:
                    break
                page = collector.ContinueRetrievePropertiesEx(token=page.token)
            return results
        finally:
            view.Destroy()

    def _find_by_name(self, obj_type: Any, name: str) -> Any | None:
        """Find a managed object of a type by its name."""
        for props in self._collect(obj_type, ["name"]):
            if props.get("name") == name:
                return props["obj"]
        return None

    def _get_datastore(self, name: str) -> Any:
        """Return the datastore managed object with the given name."""
        datastore = self._datastores.get(name)
        if datastore is None:
            datastore = self._find_by_name(vim.Datastore, name)
            if datastore is None:
                raise PlatformError(f"Datastore not found: {name}")
            self._datastores[name] = datastore
        return datastore

    @staticmethod
    def _datacenter_of(entity: Any) -> Any:
        """Walk up the inventory tree to the datacenter owning an entity."""
        parent = entity.parent
        while parent is not None and not isinstance(parent, vim.Datacenter):
            parent = parent.parent
        if parent is None:
            raise PlatformError(f"No datacenter found for {entity.name}")
        return parent


def _fault_message(error: Exception) -> str:
    """Extract a readable message from a vmodl fault or OS error."""
    msg = getattr(error, "msg", None)
    return msg or str(error)

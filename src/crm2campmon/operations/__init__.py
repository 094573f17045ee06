"""Operations invoked by the host with a serialized request."""

from crm2campmon.exceptions import UnknownOperationError
from crm2campmon.operations.base import Operation, OperationContext
from crm2campmon.operations.disconnect import DisconnectOperation
from crm2campmon.operations.load_metadata import LoadMetadataOperation, is_field_checked
from crm2campmon.operations.save_configuration import SaveConfigurationOperation

OPERATIONS: dict[str, type[Operation]] = {
    op.name: op
    for op in (LoadMetadataOperation, SaveConfigurationOperation, DisconnectOperation)
}


def run_operation(name: str, serialized_data: str, context: OperationContext) -> str:
    """Dispatch a serialized request to the named operation."""
    try:
        operation_cls = OPERATIONS[name]
    except KeyError:
        raise UnknownOperationError(name) from None
    return operation_cls(context).execute(serialized_data)


__all__ = [
    "OPERATIONS",
    "DisconnectOperation",
    "LoadMetadataOperation",
    "Operation",
    "OperationContext",
    "SaveConfigurationOperation",
    "is_field_checked",
    "run_operation",
]

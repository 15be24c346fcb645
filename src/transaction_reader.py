import csv
import logging
from typing import Iterator, List, Optional, Tuple

from amount import Amount, InvalidAmountError
from models import Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1


class InputError(Exception):
    """The input as a whole cannot be processed."""


class EmptyInputError(InputError):
    pass


class InvalidInputError(InputError):
    pass


class IngestionError(ValueError):
    """A single record cannot be turned into a Transaction."""


def read_rows(filepath: str) -> Iterator[Tuple[int, List[str]]]:
    """
    Yield (line_number, fields) for every data row in a CSV file.
    The first row is the header and is skipped; blank lines are ignored.
    """
    with open(filepath, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f, skipinitialspace=True)
        try:
            header = next(reader, None)
            if header is None:
                raise EmptyInputError(f"{filepath} is empty")
            logger.debug(f"Header: {header}")

            for fields in reader:
                if not fields or all(not field.strip() for field in fields):
                    continue
                yield reader.line_num, fields
        except (csv.Error, UnicodeDecodeError) as e:
            raise InvalidInputError(f"{filepath} is not a valid CSV file (line {reader.line_num}): {e}")


def parse_row(fields: List[str]) -> Transaction:
    """Parse CSV fields (type, client, tx[, amount]) into a Transaction."""
    if len(fields) not in (3, 4):
        raise IngestionError(f"expected 3 or 4 fields, got {len(fields)}")

    normalized = [field.strip() for field in fields]

    transaction_type = TransactionType.parse(normalized[0])
    client_id = _parse_id(normalized[1], "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(normalized[2], "tx", MAX_TRANSACTION_ID)
    amount = _parse_amount(normalized[3]) if len(normalized) == 4 else None

    if transaction_type.is_monetary:
        if amount is None:
            raise IngestionError(f"{transaction_type.value} tx {transaction_id} has no amount")
        if amount.is_negative():
            raise IngestionError(f"{transaction_type.value} tx {transaction_id} has negative amount {amount}")
    elif amount is not None:
        logger.debug(f"Ignoring amount {amount} on {transaction_type.value} tx {transaction_id}")
        amount = None

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(text: str, name: str, maximum: int) -> int:
    try:
        value = int(text)
    except ValueError:
        raise IngestionError(f"invalid {name} id {text!r}")
    if not 0 <= value <= maximum:
        raise IngestionError(f"{name} id {value} out of range")
    return value


def _parse_amount(text: str) -> Optional[Amount]:
    if text in ("", "None"):
        return None
    try:
        return Amount.parse(text)
    except InvalidAmountError as e:
        raise IngestionError(f"invalid amount: {e}")

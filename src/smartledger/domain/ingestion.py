"""Ingestion coordinator domain service."""

from typing import Any, Optional

from smartledger.database.base import Database
from smartledger.domain.account import AccountService
from smartledger.domain.entities import (
    AccountInfo,
    IngestionResult,
    Upload as UploadEntity,
    UploadStatus,
)
from smartledger.domain.errors import (
    ConflictError,
    IngestionError,
    NotFoundError,
    upload_already_finished,
    upload_not_found,
)
from smartledger.domain.ledger import LedgerService
from smartledger.domain.transaction import TransactionService
from smartledger.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class IngestionService:
    """Service for ingesting categorized statement transactions.

    Stages run in order: resolve the account, tie the upload to it, insert
    the batch, then post every stored row. A failure before the batch is
    stored fails the upload; a failure while posting one row is reported
    and the remaining rows continue.
    """

    def __init__(self, db: Database):
        """Initialize ingestion service.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)
        self.transaction_service = TransactionService(db)
        self.ledger_service = LedgerService(db)

    def start_upload(self, file_name: Optional[str] = None, file_type: Optional[str] = None) -> int:
        """Create an upload record in processing state.

        Returns:
            Upload ID
        """
        upload_id = self.db.create_upload(file_name=file_name, file_type=file_type)
        logger.info("upload_started", upload_id=upload_id, file_name=file_name)
        return upload_id

    def get_upload(self, upload_id: int) -> UploadEntity:
        """Get upload by ID.

        Raises:
            NotFoundError: If the upload does not exist
        """
        upload = self.db.get_upload(upload_id)
        if upload is None:
            raise NotFoundError(upload_not_found(upload_id))
        return upload

    def list_uploads(self) -> list[UploadEntity]:
        """List uploads, newest first."""
        return self.db.list_uploads()

    def ingest(
        self,
        upload_id: Optional[int],
        raw_transactions: list[dict[str, Any]],
        account_info: Optional[AccountInfo] = None,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> IngestionResult:
        """Ingest a batch of untrusted transaction candidates.

        Args:
            upload_id: Upload in processing state, or None to create one
            raw_transactions: Candidate dicts in statement order
            account_info: Statement account metadata; None uses the default account
            file_name: File name for a newly created upload
            file_type: File type for a newly created upload

        Returns:
            IngestionResult with stored and posted counts and row-level errors

        Raises:
            NotFoundError: If upload_id does not exist
            ConflictError: If the upload has already completed or failed
            IngestionError: If account resolution, batch insert or the final
                status write failed; the upload is marked failed before this is raised
        """
        if upload_id is None:
            upload_id = self.start_upload(file_name=file_name, file_type=file_type)
        else:
            upload = self.get_upload(upload_id)
            if upload.status is not UploadStatus.PROCESSING:
                raise ConflictError(upload_already_finished(upload_id, upload.status.value))

        with LogContext(upload_id=upload_id):
            logger.info("ingestion_started", candidates=len(raw_transactions))

            try:
                account_id = self.account_service.resolve_or_create_account(account_info)
            except Exception as e:
                raise self._failure(upload_id, f"Account resolution failed: {e}") from e

            try:
                self.db.update_upload(upload_id, account_id=account_id)
            except Exception as e:
                raise self._failure(upload_id, f"Upload record update failed: {e}") from e

            try:
                transactions, row_errors = self.transaction_service.insert_batch(
                    raw_transactions, upload_id=upload_id, account_id=account_id
                )
            except Exception as e:
                raise self._failure(upload_id, f"Transaction insert failed: {e}") from e

            result = IngestionResult(
                upload_id=upload_id,
                account_id=account_id,
                transaction_count=len(transactions),
                errors=list(row_errors),
            )

            for row, txn in enumerate(transactions, start=1):
                if txn.post_error:
                    # Normalization already reported this row
                    continue
                try:
                    self.ledger_service.post(txn)
                    result.posted_count += 1
                except Exception as e:
                    result.errors.append(f"Row {row}: {e}")

            try:
                self.db.update_upload(
                    upload_id,
                    status=UploadStatus.COMPLETED,
                    transaction_count=result.transaction_count,
                )
            except Exception as e:
                raise self._failure(upload_id, f"Upload completion failed: {e}") from e
            logger.info(
                "ingestion_completed",
                account_id=account_id,
                transactions=result.transaction_count,
                posted=result.posted_count,
                errors=len(result.errors),
            )
        return result

    def _failure(self, upload_id: int, message: str) -> IngestionError:
        """Mark the upload failed and build the error to raise."""
        logger.error("upload_failed", error=message)
        self.db.update_upload(upload_id, status=UploadStatus.FAILED, error_message=message)
        return IngestionError(message, upload_id=upload_id)

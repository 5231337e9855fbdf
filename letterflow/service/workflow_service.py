from dataclasses import replace
from datetime import datetime, timezone

from letterflow.config.settings import Settings
from letterflow.database.repositories.submission_repository import SubmissionRepository
from letterflow.database.repositories.template_repository import TemplateRepository
from letterflow.database.repositories.user_repository import UserRepository
from letterflow.identity.base import BaseIdentityResolver
from letterflow.identity.password_hasher import PasswordHasher
from letterflow.identity.resolver import DatabaseIdentityResolver
from letterflow.logging.logger import Log
from letterflow.notifications.base import BaseNotificationSink
from letterflow.notifications.models import NotificationEvent, NotificationKind
from letterflow.notifications.sinks import LogNotificationSink
from letterflow.signing.base import BaseSigner
from letterflow.signing.factory import SignerFactory
from letterflow.storage.base import BaseBlobStore
from letterflow.storage.factory import BlobStoreFactory
from letterflow.storage.keys import approved_file_key, file_extension, submission_file_key
from letterflow.views.projector import ViewProjector
from letterflow.workflow.exceptions import (
    SubmissionNotFoundError,
    SubmissionValidationError,
    WorkflowError,
)
from letterflow.workflow.models import (
    Action,
    ProgressStep,
    Role,
    RoleView,
    Submission,
    SubmissionDraft,
    Subject,
    Template,
    TransitionPatch,
)
from letterflow.workflow.progress import progress_steps, status_label
from letterflow.workflow.state_machine import authorize_create, decide, validate_draft

ALLOWED_EXTENSIONS = frozenset({"pdf"})

_SUCCESS_MESSAGES: dict[Action, str] = {
    Action.MARK_IN_REVIEW: "Submission is now in review",
    Action.APPROVE: "Submission approved",
    Action.REJECT: "Submission rejected",
}


class WorkflowService:
    """Request/response entry point for the letter approval workflow.

    Flow per action: load -> decide -> (sign) -> apply_transition -> notify.
    The caller's subject is passed explicitly to every call.
    """

    def __init__(
        self,
        submission_repo: SubmissionRepository,
        template_repo: TemplateRepository,
        identity: BaseIdentityResolver,
        blob_store: BaseBlobStore,
        signer: BaseSigner,
        sink: BaseNotificationSink,
        projector: ViewProjector,
        settings: Settings,
    ) -> None:
        self._submission_repo = submission_repo
        self._template_repo = template_repo
        self._identity = identity
        self._blob_store = blob_store
        self._signer = signer
        self._sink = sink
        self._projector = projector
        self._settings = settings

    def login(self, username: str, secret: str) -> Subject:
        return self._identity.authenticate(username, secret)

    def list_templates(self) -> list[Template]:
        return self._template_repo.list_all()

    def get_submission(self, subject: Subject, submission_id: str) -> Submission:
        """Fetch one submission. Requesters only see their own."""
        return self._load_visible(subject, submission_id)

    def submit(
        self,
        subject: Subject,
        template_id: str,
        title: str,
        filename: str,
        data: bytes,
        description: str | None = None,
    ) -> Submission:
        """Upload the letter and create a submission in the initial status."""
        try:
            authorize_create(subject)
            self._template_repo.get(template_id)
            if file_extension(filename) not in ALLOWED_EXTENSIONS:
                raise SubmissionValidationError(
                    f"File '{filename}' must be one of: {sorted(ALLOWED_EXTENSIONS)}"
                )
            if not data:
                raise SubmissionValidationError(f"File '{filename}' is empty")

            key = submission_file_key(subject.id, filename, datetime.now(timezone.utc))
            # The key stands in for the ref until the upload succeeds.
            draft = SubmissionDraft(
                template_id=template_id,
                owner_id=subject.id,
                title=title,
                description=description,
                submitted_file_ref=key,
            )
            validate_draft(draft)
            file_ref = self._blob_store.put(key, data)
            submission = self._submission_repo.create(
                replace(draft, submitted_file_ref=file_ref)
            )
        except WorkflowError as exc:
            Log.warning(f"Submission by {subject.id} rejected: {exc}")
            self._notify(NotificationKind.FAILURE, None, str(exc))
            raise

        Log.info(f"Submission {submission.id} created by {subject.id}")
        self._notify(NotificationKind.SUCCESS, submission.id, "Letter request submitted")
        return submission

    def act(
        self,
        subject: Subject,
        submission_id: str,
        action: Action,
        notes: str | None = None,
    ) -> Submission:
        """Apply one workflow action on behalf of ``subject``.

        Raises:
            SubmissionNotFoundError: unknown submission id.
            InvalidTransitionError: action not allowed for this status and role,
                or another actor moved the submission first.
            SubmissionValidationError: notes required by policy are missing.
            StorageUnavailableError: database or blob store failure.
        """
        action_name = getattr(action, "value", action)
        try:
            try:
                requested = Action(action)
            except ValueError as exc:
                raise SubmissionValidationError(f"Unknown action '{action_name}'") from exc
            submission = self._load_visible(subject, submission_id)
            patch = decide(
                submission,
                subject,
                requested,
                notes=notes,
                require_notes=self._notes_required(subject.role),
            )
            approved_ref = None
            if patch.produces_approved_file:
                approved_ref = self._render_approved_file(submission, patch)
            updated = self._submission_repo.apply_transition(
                patch, approved_file_ref=approved_ref
            )
        except WorkflowError as exc:
            Log.warning(
                f"Action {action_name} on {submission_id} by {subject.id} rejected: {exc}"
            )
            self._notify(NotificationKind.FAILURE, submission_id, str(exc))
            raise

        Log.info(
            f"Submission {submission_id}: {patch.expected_status.value} -> "
            f"{updated.status.value} by {subject.role.value} {subject.id}"
        )
        self._notify(
            NotificationKind.SUCCESS,
            submission_id,
            _SUCCESS_MESSAGES[patch.action],
        )
        return updated

    def dashboard(self, subject: Subject, include_history: bool = False) -> RoleView:
        """Role-scoped view; call again after any successful action to refresh."""
        return self._projector.view_for(subject, include_history=include_history)

    def file_url(self, submission: Submission) -> str:
        return self._blob_store.url_for(submission.submitted_file_ref)

    def approved_file_url(self, submission: Submission) -> str | None:
        if submission.approved_file_ref is None:
            return None
        return self._blob_store.url_for(submission.approved_file_ref)

    def status_label(self, submission: Submission) -> str:
        return status_label(submission.status)

    def progress(self, submission: Submission) -> list[ProgressStep]:
        """Requester-facing steps tracker for ``submission``."""
        return progress_steps(submission.status)

    def _load_visible(self, subject: Subject, submission_id: str) -> Submission:
        """Load a submission, hiding other owners' submissions from requesters."""
        submission = self._submission_repo.get(submission_id)
        if subject.role is Role.REQUESTER and submission.owner_id != subject.id:
            Log.warning(
                f"Requester {subject.id} asked for submission {submission_id} owned by someone else"
            )
            raise SubmissionNotFoundError(submission_id)
        return submission

    def _render_approved_file(self, submission: Submission, patch: TransitionPatch) -> str:
        """Sign the submitted letter and store it as the approved artifact."""
        submitted = self._blob_store.get(submission.submitted_file_ref)
        signed = self._signer.sign(
            submitted,
            signed_by=patch.fields.actor_id,
            signed_at=patch.fields.acted_at,
            notes=patch.fields.notes,
        )
        return self._blob_store.put(
            approved_file_key(submission.owner_id, submission.id, patch.fields.acted_at),
            signed,
        )

    def _notes_required(self, role: Role) -> bool:
        if role is Role.REVIEWER:
            return self._settings.require_reviewer_notes
        if role is Role.APPROVER:
            return self._settings.require_approver_notes
        return False

    def _notify(
        self,
        kind: NotificationKind,
        submission_id: str | None,
        message: str,
    ) -> None:
        try:
            self._sink.emit(
                NotificationEvent(kind=kind, submission_id=submission_id, message=message)
            )
        except Exception as exc:
            Log.error(f"Notification sink failed: {exc}")


def build_service(settings: Settings) -> WorkflowService:
    """Build a WorkflowService with the configured adapters."""
    submission_repo = SubmissionRepository()
    template_repo = TemplateRepository()
    identity = DatabaseIdentityResolver(
        UserRepository(), PasswordHasher(settings.password_hash_iterations)
    )
    return WorkflowService(
        submission_repo=submission_repo,
        template_repo=template_repo,
        identity=identity,
        blob_store=BlobStoreFactory.create(settings),
        signer=SignerFactory.create(settings),
        sink=LogNotificationSink(),
        projector=ViewProjector(submission_repo),
        settings=settings,
    )

import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Sandbox = "sandbox"
    Test = "test"
    Local = "local"


class QueryStatus(enum.Enum):
    Disabled = "disabled"
    Loading = "loading"
    Success = "success"
    Error = "error"


class MutationStatus(enum.Enum):
    Idle = "idle"
    Pending = "pending"
    Success = "success"
    Error = "error"


class UploadFormState(enum.Enum):
    Empty = "empty"
    FileSelected = "file-selected"
    Uploading = "uploading"


class NoticeLevel(enum.Enum):
    Info = "info"
    Success = "success"
    Error = "error"

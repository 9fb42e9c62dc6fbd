from studytrack.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from studytrack.app.models.user import User  # noqa: F401
from studytrack.app.models.student import Student  # noqa: F401
from studytrack.app.models.parent_link import ParentStudentLink  # noqa: F401
from studytrack.app.models.subject import Subject  # noqa: F401
from studytrack.app.models.unit import Unit  # noqa: F401
from studytrack.app.models.topic import Topic  # noqa: F401
from studytrack.app.models.progress import Progress  # noqa: F401
from studytrack.app.models.setup_state import SetupState  # noqa: F401

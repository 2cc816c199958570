"""Errors raised while reading, compiling and resolving templates."""


class FormpatchError(Exception):
    """Base class for every error raised by formpatch."""


class SexpSyntaxError(FormpatchError):
    """Raised when source text cannot be read as s-expressions."""

    def __init__(self, message: str, offset: int | None = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class TemplateSyntaxError(FormpatchError):
    """Raised when a template is malformed. Detected when the template is compiled."""


class InvalidBindingName(TemplateSyntaxError):
    """Raised when a let binding name is not a symbol."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Binding name must be a symbol, got {name!r}")


class TemplateResolutionError(FormpatchError):
    """Base class for failures while locating templates inside a definition."""


class AmbiguousTemplate(TemplateResolutionError):
    """Raised when several templates match at the same position."""

    def __init__(self, templates, forms):
        self.templates = templates
        self.forms = forms
        super().__init__(f"{len(templates)} templates match the same forms: {forms!r}")


class AmbiguousForm(TemplateResolutionError):
    """Raised when a form matching a template has subforms matching other templates."""

    def __init__(self, template, forms):
        self.template = template
        self.forms = forms
        super().__init__(f"A form matching a template has subforms matching other templates: {forms!r}")


class TemplateMatchedTwice(TemplateResolutionError):
    """Raised when a template matches more than one place in a definition."""

    def __init__(self, template):
        self.template = template
        super().__init__(f"Template matched more than once: {template!r}")


class TemplateUnmatched(TemplateResolutionError):
    """Raised when a template did not match any form of a definition."""

    def __init__(self, template):
        self.template = template
        super().__init__(f"Template did not match any form: {template!r}")


class IncompleteMatch(TemplateResolutionError):
    """Raised when a match that has to consume all of its input only consumed part of it."""

    def __init__(self, template, forms):
        self.template = template
        self.forms = forms
        super().__init__(f"Template {template!r} does not fully match {forms!r}")


class DefinitionNotFound(FormpatchError):
    """Raised when the definition a template applies to cannot be located."""

    def __init__(self, kind, name):
        self.kind = kind
        self.name = name
        super().__init__(f"No {kind} definition named {name}")


class TemplateNotFound(FormpatchError):
    """Raised when no templates are defined for a name."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"No templates defined for {name}")


class VersionNotFound(FormpatchError):
    """Raised when templates exist for a name, but not for the requested kind."""

    def __init__(self, name, kind):
        self.name = name
        self.kind = kind
        super().__init__(f"No {kind} templates defined for {name}")

import os
from jinja2 import Environment, FileSystemLoader, select_autoescape

# Initialize Jinja2 environment
template_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "templates")
jinja_env = Environment(
    loader=FileSystemLoader(template_dir),
    autoescape=select_autoescape(['html', 'xml'])
)

def load_template(path: str, **kwargs) -> str:
    """
    Render a template from the templates/ directory with Jinja2.

    Raises:
        jinja2.TemplateNotFound: If the template does not exist
    """
    template = jinja_env.get_template(path)
    return template.render(**kwargs)

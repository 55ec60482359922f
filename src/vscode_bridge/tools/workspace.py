"""
Unified tool interface for agents.

Exposes the filesystem, editor, shell and scaffolding operations through
function calling (OpenAI function calling format).
"""

import itertools
import logging
from typing import Any, Awaitable, Callable, Optional

from vscode_bridge.editor.launcher import EditorLauncher
from vscode_bridge.editor.shell import ShellRunner
from vscode_bridge.filesystem.authorizer import PathAuthorizer
from vscode_bridge.filesystem.exceptions import BridgeError
from vscode_bridge.filesystem.reader import RestrictedFileReader
from vscode_bridge.filesystem.search import TextScanner
from vscode_bridge.filesystem.walker import DirectoryWalker
from vscode_bridge.filesystem.writer import RestrictedFileWriter
from vscode_bridge.scaffold.project import ProjectScaffolder
from vscode_bridge.scaffold.templates import TemplateRegistry
from vscode_bridge.settings.config import BridgeConfig

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[dict[str, Any]]]


def _schema(name: str, description: str, properties: dict, required: list[str]) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


class WorkspaceTools:
    """
    Tool dispatcher for agent function calling.

    Every path argument is authorized against the configured allowed
    directories. Failures never propagate out of `execute_tool`; they are
    returned as ``{"success": False, "error": ..., "error_type": ...}``.

    Usage:
        config = BridgeConfig(allowed_directories=["~/Code"])
        tools = WorkspaceTools(config)

        schemas = tools.get_tool_schemas()
        result = await tools.execute_tool(
            tool_name="read_file",
            arguments={"path": "~/Code/app/main.py"},
        )
    """

    def __init__(
        self,
        config: BridgeConfig,
        authorizer: Optional[PathAuthorizer] = None,
        templates: Optional[TemplateRegistry] = None,
    ):
        self.config = config
        self.authorizer = authorizer or PathAuthorizer.from_config(config)

        walker = DirectoryWalker(max_depth=config.max_depth, authorizer=self.authorizer)
        self.reader = RestrictedFileReader(self.authorizer, walker)
        self.writer = RestrictedFileWriter(self.authorizer)
        self.scanner = TextScanner(walker, authorizer=self.authorizer)
        self.editor = EditorLauncher.from_config(config, self.authorizer)
        self.shell = ShellRunner.from_config(config, self.authorizer)
        self.scaffolder = ProjectScaffolder(
            writer=self.writer,
            templates=templates or TemplateRegistry.from_directory(config.templates_dir),
            default_workspace=config.default_workspace,
            launcher=self.editor,
            auto_open_editor=config.auto_open_editor,
        )

        self._handlers: dict[str, ToolHandler] = {
            "list_files": self._list_files,
            "read_file": self._read_file,
            "write_file": self._write_file,
            "delete_file": self._delete_file,
            "create_directory": self._create_directory,
            "search_files": self._search_files,
            "open_editor": self._open_editor,
            "list_editor_extensions": self._list_editor_extensions,
            "install_editor_extension": self._install_editor_extension,
            "uninstall_editor_extension": self._uninstall_editor_extension,
            "create_project": self._create_project,
            "run_terminal_command": self._run_terminal_command,
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    def get_tool_schemas(self) -> list[dict[str, Any]]:
        """
        Get OpenAI function calling schemas for all available tools.

        Returns:
            List of tool schemas in OpenAI format
        """
        return [
            _schema(
                "list_files",
                "List files and directories in a path with size, modification time and permissions.",
                {
                    "path": {"type": "string", "description": "Directory path to list"},
                    "include_hidden": {
                        "type": "boolean",
                        "description": "Include hidden files and directories (default: false)",
                    },
                    "recursive": {
                        "type": "boolean",
                        "description": "List files recursively (default: false)",
                    },
                },
                ["path"],
            ),
            _schema(
                "read_file",
                "Read the contents of a text file.",
                {
                    "path": {"type": "string", "description": "File path to read"},
                    "encoding": {"type": "string", "description": "File encoding (default: utf-8)"},
                },
                ["path"],
            ),
            _schema(
                "write_file",
                "Write content to a file, creating parent directories if needed.",
                {
                    "path": {"type": "string", "description": "File path to write to"},
                    "content": {"type": "string", "description": "Content to write"},
                    "encoding": {"type": "string", "description": "File encoding (default: utf-8)"},
                    "create_parents": {
                        "type": "boolean",
                        "description": "Create parent directories if they don't exist (default: true)",
                    },
                },
                ["path", "content"],
            ),
            _schema(
                "delete_file",
                "Delete a file or directory.",
                {
                    "path": {"type": "string", "description": "Path to delete"},
                    "recursive": {
                        "type": "boolean",
                        "description": "Delete directories with their contents (default: false)",
                    },
                },
                ["path"],
            ),
            _schema(
                "create_directory",
                "Create a directory and its parent directories.",
                {"path": {"type": "string", "description": "Directory path to create"}},
                ["path"],
            ),
            _schema(
                "search_files",
                "Search for a regular expression in files within a directory. "
                "Returns matching lines with line numbers.",
                {
                    "directory": {"type": "string", "description": "Directory to search in"},
                    "pattern": {"type": "string", "description": "Regular expression pattern"},
                    "extensions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "File extensions to include, e.g. ['.py', '.ts']",
                    },
                    "recursive": {
                        "type": "boolean",
                        "description": "Search subdirectories (default: true)",
                    },
                    "case_sensitive": {
                        "type": "boolean",
                        "description": "Case sensitive search (default: false)",
                    },
                },
                ["directory", "pattern"],
            ),
            _schema(
                "open_editor",
                "Open a file, directory or workspace in the editor.",
                {
                    "path": {"type": "string", "description": "Path to open"},
                    "new_window": {"type": "boolean", "description": "Open in a new window"},
                    "wait": {"type": "boolean", "description": "Wait for the window to close"},
                },
                ["path"],
            ),
            _schema(
                "list_editor_extensions",
                "List installed editor extensions.",
                {
                    "enabled_only": {
                        "type": "boolean",
                        "description": "Show only enabled extensions (default: false)",
                    }
                },
                [],
            ),
            _schema(
                "install_editor_extension",
                "Install an editor extension.",
                {
                    "extension_id": {
                        "type": "string",
                        "description": "Extension id, e.g. 'ms-python.python'",
                    },
                    "force": {
                        "type": "boolean",
                        "description": "Force install even if already installed",
                    },
                },
                ["extension_id"],
            ),
            _schema(
                "uninstall_editor_extension",
                "Uninstall an editor extension.",
                {"extension_id": {"type": "string", "description": "Extension id to uninstall"}},
                ["extension_id"],
            ),
            _schema(
                "create_project",
                "Create a new project directory from a template.",
                {
                    "name": {"type": "string", "description": "Project name"},
                    "template": {
                        "type": "string",
                        "description": "Project template",
                        "enum": self.scaffolder.templates.names(),
                    },
                    "directory": {
                        "type": "string",
                        "description": "Parent directory (default: configured workspace)",
                    },
                    "open_in_editor": {
                        "type": "boolean",
                        "description": "Open the project in the editor after creation (default: true)",
                    },
                },
                ["name"],
            ),
            _schema(
                "run_terminal_command",
                "Execute a shell command, optionally in a given working directory.",
                {
                    "command": {"type": "string", "description": "Command to execute"},
                    "directory": {"type": "string", "description": "Working directory"},
                    "shell": {"type": "string", "description": "Shell to use"},
                },
                ["command"],
            ),
        ]

    async def execute_tool(
        self, tool_name: str, arguments: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Execute a tool call from an agent.

        Args:
            tool_name: Name of the tool to execute
            arguments: Tool arguments (from the function call)

        Returns:
            Tool execution result as a dict

        Raises:
            ValueError: If tool name is unknown
        """
        handler = self._handlers.get(tool_name)
        if handler is None:
            raise ValueError(f"Unknown tool: {tool_name}")

        arguments = arguments or {}
        try:
            return await handler(**arguments)
        except BridgeError as e:
            logger.warning(f"{tool_name} failed: {e}")
            return self._failure(e, type(e).__name__)
        except TypeError as e:
            logger.warning(f"{tool_name} called with invalid arguments: {e}")
            return self._failure(e, "InvalidArguments")
        except Exception as e:
            logger.error(f"{tool_name} unexpected error: {e}")
            return self._failure(f"Unexpected error: {e}", "UnexpectedError")

    @staticmethod
    def _failure(error: object, error_type: str) -> dict[str, Any]:
        return {
            "success": False,
            "error": str(error),
            "error_type": error_type,
            "text": f"Error: {error}",
        }

    async def _list_files(
        self, path: str, include_hidden: bool = False, recursive: bool = False
    ) -> dict[str, Any]:
        entries = self.reader.list_directory(
            path, include_hidden=include_hidden, recursive=recursive
        )
        return {
            "success": True,
            "path": path,
            "files": [entry.model_dump(mode="json") for entry in entries],
            "count": len(entries),
            "text": f"Files in {path}:\n\n" + "\n".join(str(e) for e in entries),
        }

    async def _read_file(self, path: str, encoding: str = "utf-8") -> dict[str, Any]:
        content = self.reader.read_file(path, encoding=encoding)
        return {
            "success": True,
            "path": path,
            "content": content,
            "size": len(content),
            "text": f"File: {path}\n\n{content}",
        }

    async def _write_file(
        self,
        path: str,
        content: str,
        encoding: str = "utf-8",
        create_parents: bool = True,
    ) -> dict[str, Any]:
        written = self.writer.write_file(
            path, content, encoding=encoding, create_parents=create_parents
        )
        return {
            "success": True,
            "path": path,
            "size": written,
            "text": f"Successfully wrote {written} characters to {path}",
        }

    async def _delete_file(self, path: str, recursive: bool = False) -> dict[str, Any]:
        self.writer.delete(path, recursive=recursive)
        return {
            "success": True,
            "path": path,
            "text": f"Successfully deleted {path}",
        }

    async def _create_directory(self, path: str) -> dict[str, Any]:
        self.writer.create_directory(path)
        return {
            "success": True,
            "path": path,
            "text": f"Successfully created directory {path}",
        }

    async def _search_files(
        self,
        directory: str,
        pattern: str,
        extensions: Optional[list[str]] = None,
        recursive: bool = True,
        case_sensitive: bool = False,
    ) -> dict[str, Any]:
        root = self.authorizer.authorize(directory)
        matches = self.scanner.search(
            root,
            pattern,
            extensions=extensions or (),
            recursive=recursive,
            case_sensitive=case_sensitive,
        )

        limit = self.config.max_search_results
        results = list(itertools.islice(matches, limit + 1))
        truncated = len(results) > limit
        if truncated:
            logger.warning(f"Search returned more than {limit} matches, truncating")
            results = results[:limit]

        body = "\n".join(str(m) for m in results) if results else "No matches found."
        return {
            "success": True,
            "pattern": pattern,
            "directory": directory,
            "matches": [m.model_dump() for m in results],
            "count": len(results),
            "truncated": truncated,
            "text": f'Search results for "{pattern}" in {directory}:\n\n{body}',
        }

    async def _open_editor(
        self, path: str, new_window: bool = False, wait: bool = False
    ) -> dict[str, Any]:
        result = await self.editor.open(path, new_window=new_window, wait=wait)
        text = f"Editor opened with {path}"
        if result.stderr.strip():
            text += f"\nWarning: {result.stderr.strip()}"
        return {"success": True, "path": path, "text": text}

    async def _list_editor_extensions(self, enabled_only: bool = False) -> dict[str, Any]:
        extensions = await self.editor.list_extensions(enabled_only=enabled_only)
        return {
            "success": True,
            "extensions": extensions,
            "count": len(extensions),
            "text": "Installed editor extensions:\n\n" + "\n".join(extensions),
        }

    async def _install_editor_extension(
        self, extension_id: str, force: bool = False
    ) -> dict[str, Any]:
        result = await self.editor.install_extension(extension_id, force=force)
        return {
            "success": True,
            "extension_id": extension_id,
            "text": self._process_text(
                f"Extension {extension_id} installation result:", result.stdout, result.stderr
            ),
        }

    async def _uninstall_editor_extension(self, extension_id: str) -> dict[str, Any]:
        result = await self.editor.uninstall_extension(extension_id)
        return {
            "success": True,
            "extension_id": extension_id,
            "text": self._process_text(
                f"Extension {extension_id} uninstallation result:", result.stdout, result.stderr
            ),
        }

    async def _create_project(
        self,
        name: str,
        template: str = "empty",
        directory: Optional[str] = None,
        open_in_editor: bool = True,
    ) -> dict[str, Any]:
        result = await self.scaffolder.create_project(
            name, template=template, directory=directory, open_in_editor=open_in_editor
        )
        return {
            "success": True,
            "name": result.name,
            "template": result.template,
            "path": str(result.path),
            "files": result.files,
            "opened_in_editor": result.opened_in_editor,
            "text": result.summary(),
        }

    async def _run_terminal_command(
        self,
        command: str,
        directory: Optional[str] = None,
        shell: Optional[str] = None,
    ) -> dict[str, Any]:
        result = await self.shell.run(command, directory=directory, shell=shell)
        text = (
            f"Command: {command}\n"
            f"Working Directory: {result.cwd or 'current directory'}\n"
            f"Exit Code: {result.returncode}\n\n"
            f"Output:\n{result.stdout}"
        )
        if result.stderr:
            text += f"\nErrors:\n{result.stderr}"
        return {
            "success": result.ok,
            "command": command,
            "directory": result.cwd,
            "returncode": result.returncode,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "text": text,
        }

    @staticmethod
    def _process_text(header: str, stdout: str, stderr: str) -> str:
        text = f"{header}\n{stdout}"
        if stderr.strip():
            text += f"\nWarnings: {stderr}"
        return text

    def get_summary(self) -> dict[str, Any]:
        """Summary of the effective configuration."""
        return {
            "allowed_directories": [str(d) for d in self.authorizer.roots],
            "default_workspace": str(self.config.default_workspace),
            "auto_open_editor": self.config.auto_open_editor,
            "editor_command": self.config.editor_command,
            "shell": self.config.shell,
            "command_timeout_seconds": self.config.command_timeout_seconds,
            "max_depth": self.config.max_depth,
            "max_search_results": self.config.max_search_results,
            "templates": self.scaffolder.templates.names(),
        }

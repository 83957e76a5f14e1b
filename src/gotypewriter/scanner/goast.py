from __future__ import annotations

import hashlib
import json
import logging
import os
import subprocess
import tempfile
import threading
from pathlib import Path

from ..errors import ToolchainError
from ..paths import default_cache_dir, go_command

log = logging.getLogger(__name__)

_build_lock = threading.Lock()


def parse_go_sources(items: list[tuple[str, str]]) -> list[dict]:
    """Parse (path, source) pairs with go/parser; one JSON object per input.

    Each object holds either `error` ({line, col, msg}) or the file's
    `package`, `imports` and type `decls`.
    """
    if not items:
        return []
    helper = ensure_helper()
    payload = json.dumps([{"path": path, "source": source} for path, source in items])
    out = _run([str(helper)], input=payload)

    try:
        obj = json.loads(out)
    except ValueError as e:
        raise ToolchainError(f"failed to parse go scan output: {e}\n{out}") from e
    if not isinstance(obj, list) or len(obj) != len(items):
        raise ToolchainError(f"go scan returned {type(obj).__name__} for {len(items)} file(s)")
    return obj


def ensure_helper() -> Path:
    """Build the scan helper once per helper revision and return its path."""
    source = _helper_go_source()
    digest = hashlib.sha256(source.encode("utf-8")).hexdigest()[:12]
    suffix = ".exe" if os.name == "nt" else ""
    target = default_cache_dir() / f"scan-{digest}{suffix}"

    with _build_lock:
        if target.is_file():
            return target
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="gotypewriter-goscan-", dir=str(target.parent)) as td:
            build_dir = Path(td)
            (build_dir / "go.mod").write_text(
                "\n".join(
                    [
                        "module gotypewriter.goscan",
                        "",
                        "go 1.18",
                        "",
                    ]
                ),
                encoding="utf-8",
            )
            (build_dir / "main.go").write_text(source, encoding="utf-8")
            built = build_dir / f"scan{suffix}"
            _run([go_command(), "build", "-o", str(built), "."], cwd=build_dir)
            os.replace(built, target)
    log.info("built go scan helper %s", target)
    return target


def _run(cmd: list[str], *, cwd: Path | None = None, input: str | None = None) -> str:
    prog = cmd[0] if cmd else "<unknown>"
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            input=input.encode("utf-8") if input is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except FileNotFoundError as e:
        if prog == go_command():
            raise ToolchainError(
                "Go toolchain not found (`go` is missing from PATH). "
                "Install Go and ensure `go` is available on PATH, "
                "or point GOTYPEWRITER_GO at the executable."
            ) from e
        raise ToolchainError(f"command not found: {prog}") from e

    stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
    stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
    if proc.returncode != 0:
        out = "\n".join([s for s in [stdout.strip("\n"), stderr.strip("\n")] if s])
        raise ToolchainError(f"command failed: {' '.join(cmd)}\n{out}")
    return stdout


def _helper_go_source() -> str:
    # Keep this file stdlib-only so `go build` doesn't need network access.
    return r'''
package main

import (
	"encoding/json"
	"errors"
	"fmt"
	"go/ast"
	"go/parser"
	"go/scanner"
	"go/token"
	"go/types"
	"os"
	"strconv"
	"strings"
)

type inFile struct {
	Path   string `json:"path"`
	Source string `json:"source"`
}

type outError struct {
	Line int    `json:"line"`
	Col  int    `json:"col"`
	Msg  string `json:"msg"`
}

type outImport struct {
	Name string `json:"name"`
	Path string `json:"path"`
}

type outDecl struct {
	Name       string         `json:"name"`
	Alias      bool           `json:"alias"`
	TypeParams []string       `json:"type_params"`
	Doc        *string        `json:"doc"`
	Line       int            `json:"line"`
	Type       map[string]any `json:"type"`
}

type outFile struct {
	Path    string      `json:"path"`
	Error   *outError   `json:"error,omitempty"`
	Package string      `json:"package,omitempty"`
	Imports []outImport `json:"imports,omitempty"`
	Decls   []outDecl   `json:"decls,omitempty"`
}

func main() {
	var files []inFile
	if err := json.NewDecoder(os.Stdin).Decode(&files); err != nil {
		fmt.Fprintf(os.Stderr, "failed to decode input: %v\n", err)
		os.Exit(2)
	}

	out := make([]outFile, 0, len(files))
	for _, f := range files {
		out = append(out, parseOne(f))
	}

	enc := json.NewEncoder(os.Stdout)
	enc.SetEscapeHTML(false)
	if err := enc.Encode(out); err != nil {
		fmt.Fprintf(os.Stderr, "failed to encode output: %v\n", err)
		os.Exit(2)
	}
}

func parseOne(in inFile) outFile {
	fset := token.NewFileSet()
	file, err := parser.ParseFile(fset, in.Path, in.Source, parser.ParseComments|parser.SkipObjectResolution)
	if err != nil {
		return outFile{Path: in.Path, Error: toError(err)}
	}

	c := converter{fset: fset}
	res := outFile{Path: in.Path, Package: file.Name.Name}
	for _, imp := range file.Imports {
		path, err := strconv.Unquote(imp.Path.Value)
		if err != nil {
			continue
		}
		name := ""
		if imp.Name != nil {
			name = imp.Name.Name
		}
		res.Imports = append(res.Imports, outImport{Name: name, Path: path})
	}

	for _, decl := range file.Decls {
		gd, ok := decl.(*ast.GenDecl)
		if !ok || gd.Tok != token.TYPE {
			continue
		}
		for _, spec := range gd.Specs {
			ts, ok := spec.(*ast.TypeSpec)
			if !ok {
				continue
			}
			doc := commentText(ts.Doc)
			if doc == nil {
				doc = commentText(gd.Doc)
			}
			params := []string{}
			if ts.TypeParams != nil {
				for _, f := range ts.TypeParams.List {
					for _, n := range f.Names {
						params = append(params, n.Name)
					}
				}
			}
			res.Decls = append(res.Decls, outDecl{
				Name:       ts.Name.Name,
				Alias:      ts.Assign.IsValid(),
				TypeParams: params,
				Doc:        doc,
				Line:       fset.Position(ts.Name.Pos()).Line,
				Type:       c.expr(ts.Type),
			})
		}
	}
	return res
}

func toError(err error) *outError {
	var list scanner.ErrorList
	if errors.As(err, &list) && len(list) > 0 {
		e := list[0]
		return &outError{Line: e.Pos.Line, Col: e.Pos.Column, Msg: e.Msg}
	}
	return &outError{Msg: err.Error()}
}

// commentText keeps directive lines such as //tw:private, which
// CommentGroup.Text drops.
func commentText(g *ast.CommentGroup) *string {
	if g == nil {
		return nil
	}
	lines := []string{}
	for _, c := range g.List {
		text := c.Text
		if strings.HasPrefix(text, "//") {
			lines = append(lines, strings.TrimSpace(text[2:]))
			continue
		}
		text = strings.TrimSuffix(strings.TrimPrefix(text, "/*"), "*/")
		for _, line := range strings.Split(text, "\n") {
			lines = append(lines, strings.TrimSpace(line))
		}
	}
	for len(lines) > 0 && lines[0] == "" {
		lines = lines[1:]
	}
	for len(lines) > 0 && lines[len(lines)-1] == "" {
		lines = lines[:len(lines)-1]
	}
	if len(lines) == 0 {
		return nil
	}
	s := strings.Join(lines, "\n")
	return &s
}

type converter struct {
	fset *token.FileSet
}

func (c converter) expr(e ast.Expr) map[string]any {
	switch t := e.(type) {
	case *ast.Ident:
		return map[string]any{"kind": "ident", "name": t.Name}
	case *ast.SelectorExpr:
		if pkg, ok := t.X.(*ast.Ident); ok {
			return map[string]any{"kind": "ident", "name": t.Sel.Name, "pkg": pkg.Name}
		}
	case *ast.ParenExpr:
		return c.expr(t.X)
	case *ast.StarExpr:
		return map[string]any{"kind": "pointer", "elem": c.expr(t.X)}
	case *ast.ArrayType:
		out := map[string]any{"kind": "slice", "elem": c.expr(t.Elt)}
		if t.Len != nil {
			out["len"] = types.ExprString(t.Len)
		}
		return out
	case *ast.MapType:
		return map[string]any{"kind": "map", "key": c.expr(t.Key), "value": c.expr(t.Value)}
	case *ast.StructType:
		fields := []map[string]any{}
		if t.Fields != nil {
			for _, f := range t.Fields.List {
				fields = append(fields, c.field(f))
			}
		}
		return map[string]any{"kind": "struct", "fields": fields}
	case *ast.InterfaceType:
		empty := t.Methods == nil || len(t.Methods.List) == 0
		return map[string]any{"kind": "interface", "empty": empty}
	case *ast.FuncType:
		return map[string]any{"kind": "func"}
	case *ast.ChanType:
		return map[string]any{"kind": "chan", "elem": c.expr(t.Value)}
	case *ast.IndexExpr:
		if out := c.instance(t.X, []ast.Expr{t.Index}); out != nil {
			return out
		}
	case *ast.IndexListExpr:
		if out := c.instance(t.X, t.Indices); out != nil {
			return out
		}
	}
	return map[string]any{"kind": "other", "text": types.ExprString(e)}
}

func (c converter) instance(base ast.Expr, indices []ast.Expr) map[string]any {
	out := c.expr(base)
	if out["kind"] != "ident" {
		return nil
	}
	args := make([]map[string]any, 0, len(indices))
	for _, ix := range indices {
		args = append(args, c.expr(ix))
	}
	out["args"] = args
	return out
}

func (c converter) field(f *ast.Field) map[string]any {
	names := []string{}
	for _, n := range f.Names {
		names = append(names, n.Name)
	}
	out := map[string]any{
		"names": names,
		"type":  c.expr(f.Type),
		"line":  c.fset.Position(f.Pos()).Line,
	}
	if f.Tag != nil {
		if tag, err := strconv.Unquote(f.Tag.Value); err == nil {
			out["tag"] = tag
		}
	}
	if doc := commentText(f.Doc); doc != nil {
		out["doc"] = *doc
	}
	return out
}
'''

# --
# == Assets
#
# The stylesheet and scripts embedded in listing pages. The scripts sort
# the listing client-side (mirroring `listing.sortEntries` and
# `listing.Ordering`), format sizes and dates (mirroring `render`) and
# manage the operations pane (mirroring `selection.Operations`).

MAIN_CSS: str = """
body { font-family: monospace; margin: 1em 2em; }
h1 { margin: 0; font-size: 1.5em; }
h1 a { text-decoration: none; }
table { border-collapse: collapse; }
th, td { text-align: left; padding-right: 2em; }
th { padding-bottom: 0.5em; user-select: none; }
th.sortable { cursor: pointer; }
td.size { text-align: right; }
a, a:visited, a:hover, a:active { color: blue; }
#operations-div { margin-bottom: 1em; padding: 0.5em; background: #f4f4f4; }
#operations-div button, #download-selected { margin-top: 0.5em; }
"""

FILES_JS: str = """
var fileInfos = [];
var selectedFiles = new Set();

function fileHref(file) {
	if (file.href) { return file.href; }
	let name = file.name;
	let href = encodeURIComponent(name.replace(/[/]$/, "")).replace(/%3A/gi, ":");
	if (name.endsWith("/")) { href += "/"; }
	return href.indexOf(":") >= 0 ? "./" + href : href;
}

function renderFileList(fileInfos) {
	let fileList = document.getElementById("file-list").tBodies[0];
	while (fileList.lastChild) {
		fileList.removeChild(fileList.lastChild);
	}
	for (var i = 0; i < fileInfos.length; i++) {
		let file = fileInfos[i];
		let tr = document.createElement("tr");

		let td0 = document.createElement("td");
		let input = document.createElement("input");
		input.setAttribute("type", "checkbox");
		input.checked = selectedFiles.has(file.name);
		input.onclick = function() {
			if (input.checked) { selectedFiles.add(file.name); }
			else               { selectedFiles.delete(file.name); }
			updateSelectAllFiles();
		};
		td0.appendChild(input);
		tr.appendChild(td0);

		let td1 = document.createElement("td");
		let a = document.createElement("a");
		a.setAttribute("href", fileHref(file));
		a.appendChild(document.createTextNode(file.name));
		td1.appendChild(a);
		tr.appendChild(td1);

		let td2 = document.createElement("td");
		td2.className = "size";
		td2.appendChild(document.createTextNode(file.name.endsWith("/") ? "" : formatSize(file.size)));
		tr.appendChild(td2);

		let td3 = document.createElement("td");
		td3.appendChild(document.createTextNode(formatDate(file.date)));
		tr.appendChild(td3);

		fileList.append(tr);
	}
	updateSelectAllFiles();
}

function compareNames(x, y) {
	if      (x.name < y.name) { return -1; }
	else if (x.name > y.name) { return +1; }
	else                      { return 0; }
}

function compareSizes(x, y) {
	if      (x.size < y.size) { return -1; }
	else if (x.size > y.size) { return +1; }
	else                      { return compareNames(x, y); }
}

function compareDates(x, y) {
	if      (x.date < y.date) { return -1; }
	else if (x.date > y.date) { return +1; }
	else                      { return compareNames(x, y); }
}

var order = 0;
var orderBy = function() { return 0; };

function reorderFiles(nextOrderBy) {
	if (orderBy === nextOrderBy) {
		order *= -1;
	} else {
		order = +1;
		orderBy = nextOrderBy;
	}
	let headers = [
		[compareNames, "name-column-header"],
		[compareSizes, "size-column-header"],
		[compareDates, "date-column-header"],
	];
	for (var i = 0; i < headers.length; i++) {
		let hdr = document.getElementById(headers[i][1]);
		while (hdr.childNodes.length > 1) { hdr.removeChild(hdr.lastChild); }
		if (headers[i][0] === orderBy) {
			hdr.appendChild(document.createTextNode(" " + (order > 0 ? "\\u2191" : "\\u2193")));
		}
	}
	fileInfos.sort(function(x, y) { return order * orderBy(x, y); });
	renderFileList(fileInfos);
}

function selectAllFiles() {
	let selectAll = document.getElementById("select-all-files").checked;
	selectedFiles.clear();
	if (selectAll) {
		for (var i = 0; i < fileInfos.length; i++) { selectedFiles.add(fileInfos[i].name); }
	}
	renderFileList(fileInfos);
}

function updateSelectAllFiles() {
	let all = fileInfos.length > 0 && selectedFiles.size == fileInfos.length;
	document.getElementById("select-all-files").checked = all;
	document.getElementById("download-selected").disabled = selectedFiles.size == 0;
}
"""

FORMAT_JS: str = """
function formatSize(size) {
	let units = "=KMGTPEZY";
	while (size >= 1024) {
		size /= 1024;
		units = units.slice(1);
	}
	if (units[0] == "=") {
		return size.toFixed(0) + "B";
	} else {
		return size.toFixed(1) + units.slice(0, 1) + "iB";
	}
}

function formatDate(unix) {
	let delta = Date.now() / 1e3 - unix;
	let date = new Date(unix * 1e3);
	if (-12 * 60 * 60 < delta && delta < +12 * 60 * 60) {
		let hours = date.getHours();
		let label = hours >= 12 ? "PM" : "AM";
		return String(hours % 12 || 12) + ":" + String(date.getMinutes()).padStart(2, "0") + " " + label;
	} else {
		const month = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"];
		return month[date.getMonth()] + " " + String(date.getDate()) + ", " + String(date.getFullYear());
	}
}
"""

OPERATIONS_JS: str = """
var numPendingOperations = 0;
var numSelectedOperations = 0;
var numFinishedOperations = 0;

// Adds a row for the operation and returns a function `(status, done)`
// updating it. Rows can only be selected once done.
function startOperation(op) {
	document.getElementById("operations-div").style.display = "";
	let opsList = document.getElementById("operations-list").tBodies[0];
	let tr = document.createElement("tr");

	let td0 = document.createElement("td");
	let input = document.createElement("input");
	input.setAttribute("type", "checkbox");
	input.disabled = true;
	td0.appendChild(input);
	tr.appendChild(td0);

	let td1 = document.createElement("td");
	td1.appendChild(document.createTextNode(op));
	tr.appendChild(td1);

	let td2 = document.createElement("td");
	td2.appendChild(document.createTextNode("Pending"));
	tr.appendChild(td2);

	opsList.append(tr);
	numPendingOperations++;
	updateSelectAllOperations();
	let pending = true;
	return function(status, done) {
		td2.firstChild.textContent = status;
		if (done && pending) {
			pending = false;
			numPendingOperations--;
			numFinishedOperations++;
			input.disabled = false;
			input.onclick = function() {
				numSelectedOperations += input.checked ? 1 : -1;
				updateSelectAllOperations();
			};
			updateSelectAllOperations();
		}
	};
}

function selectAllOperations() {
	let selectAll = document.getElementById("select-all-operations").checked;
	let opsList = document.getElementById("operations-list").tBodies[0];
	numSelectedOperations = 0;
	for (var i = 0; i < opsList.children.length; i++) {
		let input = opsList.children[i].children[0].children[0];
		if (!input.disabled) {
			input.checked = selectAll;
			if (selectAll) { numSelectedOperations++; }
		}
	}
}

function updateSelectAllOperations() {
	let allSelected = numSelectedOperations == numFinishedOperations && numFinishedOperations > 0;
	document.getElementById("select-all-operations").checked = allSelected;
}

function hideSelectedOperations() {
	let opsList = document.getElementById("operations-list").tBodies[0];
	for (var i = 0; i < opsList.children.length; i++) {
		let input = opsList.children[i].children[0].children[0];
		if (input.checked) {
			opsList.children[i].remove();
			numSelectedOperations--;
			numFinishedOperations--;
			i--;
		}
	}
	updateSelectAllOperations();
	if (numPendingOperations + numFinishedOperations == 0) {
		document.getElementById("operations-div").style.display = "none";
	}
}

function downloadSelected() {
	let files = fileInfos.filter(function(file) { return selectedFiles.has(file.name) && !file.name.endsWith("/"); });
	for (var i = 0; i < files.length; i++) {
		let file = files[i];
		let name = file.name;
		let update = startOperation("Download " + name);
		fetch(fileHref(file)).then(function(response) {
			if (!response.ok) { throw new Error(response.status + " " + response.statusText); }
			return response.blob();
		}).then(function(blob) {
			let a = document.createElement("a");
			a.href = URL.createObjectURL(blob);
			a.download = name;
			a.click();
			URL.revokeObjectURL(a.href);
			update("Done", true);
		}).catch(function(error) {
			update("Failed: " + error.message, true);
		});
	}
}
"""

# EOF

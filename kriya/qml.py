"""QML UI definition for Kriya.

The canvas paints nodes from ``flowModel`` rows and edges from
``flowModel.edges``. Edge endpoints are requested from
``flowModel.edgeAnchors`` with the live delegate rectangles whenever a node
moves, resizes or the edge list changes.
"""

KRIYA_QML = r"""
import QtQuick 2.15
import QtQuick.Controls 2.15
import QtQuick.Layouts 1.15
import QtQuick.Dialogs

ApplicationWindow {
    id: root
    visible: true
    width: 1100
    height: 720
    color: "#1b2028"
    title: flowModel.title + " - Kriya"

    property var nodeItems: ({})
    property int layoutRevision: 0
    property string exportFileName: flowModel.suggestedFileName

    function openExportDialog() {
        exportDialog.selectedFile = exportDialog.currentFolder + "/" + root.exportFileName
        exportDialog.open()
    }

    function edgeGeometry(edge, revision) {
        var a = root.nodeItems[edge.sourceId]
        var b = root.nodeItems[edge.targetId]
        if (!a || !b || !a.visible || !b.visible)
            return null
        return flowModel.edgeAnchors(edge.style,
                                     a.x, a.y, a.width, a.height,
                                     b.x, b.y, b.width, b.height)
    }

    header: ToolBar {
        background: Rectangle { color: "#111826" }

        RowLayout {
            anchors.fill: parent
            anchors.leftMargin: 8
            anchors.rightMargin: 8
            spacing: 6

            TextField {
                id: titleField
                Layout.preferredWidth: 220
                text: flowModel.title
                color: "#f5f6f8"
                onEditingFinished: flowModel.setTitle(text)
                background: Rectangle {
                    color: "#1b2028"
                    radius: 4
                    border.color: "#4a5568"
                }
            }

            Button { text: "+ Task"; onClicked: flowModel.addTask() }
            Button { text: "+ Distraction"; onClicked: flowModel.addDistraction() }
            Button {
                text: flowModel.showDistractions ? "Hide distractions" : "Show distractions"
                onClicked: flowModel.toggleDistractions()
            }
            Button {
                text: flowModel.showDetails ? "Hide details" : "Show details"
                onClicked: flowModel.toggleDetails()
            }
            Button { text: "Export"; onClicked: root.openExportDialog() }
            Button { text: "Import"; onClicked: importDialog.open() }
            Button { text: "Clear"; onClicked: flowModel.clearAll() }

            Item { Layout.fillWidth: true }
        }
    }

    Shortcut { sequence: "Ctrl+Shift+T"; onActivated: flowModel.addTask() }
    Shortcut { sequence: "Ctrl+D"; onActivated: flowModel.addDistraction() }
    Shortcut { sequence: "Alt+Delete"; onActivated: flowModel.deleteSelected() }
    Shortcut { sequence: "Alt+Backspace"; onActivated: flowModel.deleteSelected() }

    Item {
        id: canvas
        anchors.fill: parent
        clip: true

        MouseArea {
            anchors.fill: parent
            onClicked: flowModel.deselect()
        }

        Repeater {
            model: flowModel.edges

            delegate: Item {
                id: edgeItem
                property var geo: root.edgeGeometry(modelData, root.layoutRevision)
                property real x1: geo ? geo.x1 : 0
                property real y1: geo ? geo.y1 : 0
                property real x2: geo ? geo.x2 : 0
                property real y2: geo ? geo.y2 : 0
                property real length: Math.sqrt((x2 - x1) * (x2 - x1) + (y2 - y1) * (y2 - y1))

                visible: geo !== null
                x: x1
                y: y1 - height / 2
                width: Math.max(1, length)
                height: 14
                transformOrigin: Item.Left
                rotation: Math.atan2(y2 - y1, x2 - x1) * 180 / Math.PI
                z: 1

                onGeoChanged: edgeCanvas.requestPaint()

                Canvas {
                    id: edgeCanvas
                    anchors.fill: parent
                    onWidthChanged: requestPaint()
                    onPaint: {
                        var ctx = getContext("2d")
                        ctx.reset()
                        if (!edgeItem.geo)
                            return
                        var mid = height / 2
                        ctx.strokeStyle = "#d0d7e2"
                        ctx.fillStyle = "#d0d7e2"
                        ctx.lineWidth = 2
                        ctx.beginPath()
                        if (edgeItem.geo.dashed) {
                            for (var pos = 0; pos < width; pos += 8) {
                                ctx.moveTo(pos, mid)
                                ctx.lineTo(Math.min(pos + 4, width), mid)
                            }
                        } else {
                            ctx.moveTo(0, mid)
                            ctx.lineTo(width, mid)
                        }
                        ctx.stroke()
                        if (edgeItem.geo.arrowEnd) {
                            ctx.beginPath()
                            ctx.moveTo(width, mid)
                            ctx.lineTo(width - 10, mid - 4)
                            ctx.lineTo(width - 10, mid + 4)
                            ctx.closePath()
                            ctx.fill()
                        }
                        if (edgeItem.geo.arrowStart) {
                            ctx.beginPath()
                            ctx.moveTo(0, mid)
                            ctx.lineTo(10, mid - 4)
                            ctx.lineTo(10, mid + 4)
                            ctx.closePath()
                            ctx.fill()
                        }
                    }
                }

                MouseArea {
                    anchors.fill: parent
                    onClicked: flowModel.activateEdge(modelData.id)
                    onDoubleClicked: flowModel.doubleActivateEdge(modelData.id)
                }
            }
        }

        Repeater {
            model: flowModel

            delegate: Rectangle {
                id: nodeRect
                property string key: model.nodeId
                property bool isTask: model.nodeType === "TASK"

                x: model.x
                y: model.y
                z: 2
                width: 160
                height: isTask && flowModel.showDetails ? 86 : 58
                radius: 8
                visible: model.nodeVisible
                color: isTask ? "#2b3646" : "#3d2f46"
                border.width: model.selected || model.linkSource ? 3 : 1
                border.color: model.linkSource ? "#f1c40f" : (model.selected ? "#4a9eff" : "#4b5563")

                Component.onCompleted: {
                    root.nodeItems[key] = nodeRect
                    root.layoutRevision++
                }
                Component.onDestruction: {
                    if (root.nodeItems[key] === nodeRect)
                        delete root.nodeItems[key]
                }
                onXChanged: root.layoutRevision++
                onYChanged: root.layoutRevision++
                onHeightChanged: root.layoutRevision++
                onVisibleChanged: root.layoutRevision++

                MouseArea {
                    anchors.fill: parent
                    acceptedButtons: Qt.LeftButton | Qt.RightButton
                    drag.target: nodeRect
                    onClicked: function(mouse) {
                        if (mouse.button === Qt.RightButton) {
                            if (nodeRect.isTask)
                                detailsDialog.openFor(nodeRect.key, model.xp, model.deadline)
                            return
                        }
                        flowModel.selectNode(nodeRect.key)
                    }
                    onDoubleClicked: flowModel.activateNode(nodeRect.key)
                    onReleased: {
                        if (nodeRect.x !== model.x || nodeRect.y !== model.y)
                            flowModel.moveNode(nodeRect.key, nodeRect.x, nodeRect.y)
                    }
                }

                TextInput {
                    id: titleInput
                    anchors.left: parent.left
                    anchors.right: parent.right
                    anchors.top: parent.top
                    anchors.margins: 10
                    text: model.title
                    color: "#f5f6f8"
                    font.pixelSize: 14
                    clip: true
                    onEditingFinished: flowModel.setNodeTitle(nodeRect.key, text)
                }

                Text {
                    visible: nodeRect.isTask && flowModel.showDetails
                    anchors.left: parent.left
                    anchors.right: parent.right
                    anchors.top: titleInput.bottom
                    anchors.margins: 10
                    color: "#cbd5e1"
                    font.pixelSize: 11
                    text: "XP " + model.xp + "   " + (model.deadline || "-")
                          + "\n" + (model.completedTime || "-")
                }

                Rectangle {
                    visible: nodeRect.isTask
                    width: 16
                    height: 16
                    radius: 8
                    anchors.right: parent.right
                    anchors.bottom: parent.bottom
                    anchors.margins: 8
                    color: model.statusColor || "transparent"
                    border.color: "#1b2028"

                    MouseArea {
                        anchors.fill: parent
                        onClicked: flowModel.advanceStatus(nodeRect.key)
                    }
                }

                Rectangle {
                    visible: !nodeRect.isTask
                    height: 10
                    radius: 4
                    anchors.left: parent.left
                    anchors.right: parent.right
                    anchors.bottom: parent.bottom
                    anchors.margins: 8
                    color: model.distractionColor || "transparent"

                    MouseArea {
                        anchors.fill: parent
                        onClicked: flowModel.advanceDistractionType(nodeRect.key)
                    }
                }
            }
        }
    }

    Dialog {
        id: detailsDialog
        title: "Task Details"
        modal: true
        anchors.centerIn: parent
        standardButtons: Dialog.Ok | Dialog.Cancel

        property string nodeId: ""

        function openFor(id, xp, deadline) {
            nodeId = id
            xpField.text = String(xp)
            deadlineField.text = deadline
            open()
        }

        ColumnLayout {
            spacing: 8

            Label { text: "XP" }
            TextField { id: xpField; Layout.preferredWidth: 200 }
            Label { text: "Deadline (YYYY-MM-DD)" }
            TextField { id: deadlineField; Layout.preferredWidth: 200 }
        }

        onAccepted: flowModel.setTaskDetails(nodeId, xpField.text, deadlineField.text)
    }

    Dialog {
        id: errorDialog
        title: "Kriya"
        modal: true
        anchors.centerIn: parent
        standardButtons: Dialog.Ok

        property alias message: errorLabel.text

        Label { id: errorLabel; wrapMode: Text.WordWrap }
    }

    FileDialog {
        id: exportDialog
        title: "Export flowchart"
        fileMode: FileDialog.SaveFile
        nameFilters: ["Flowchart files (*.json)"]
        onAccepted: flowModel.exportChart(selectedFile.toString())
    }

    FileDialog {
        id: importDialog
        title: "Import flowchart"
        fileMode: FileDialog.OpenFile
        nameFilters: ["Flowchart files (*.json)"]
        onAccepted: flowModel.importChart(selectedFile.toString())
    }

    Connections {
        target: flowModel
        function onErrorOccurred(message) {
            errorDialog.message = message
            errorDialog.open()
        }
    }
}
"""

__all__ = ["KRIYA_QML"]

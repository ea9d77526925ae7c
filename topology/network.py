from topology.location import Location, Node
from topology.link import Link
import json
import graphviz as gvz

class Network(object):
    r"""
    Class representing the substrate network
        \param description    String name describing network
        \param nodes          List of nodes in the network (vertices able to host VNFs)
        \param links          List of links in the network (arcs)
    """
    def __init__(self, description: str = None, nodes: list = None, links: list = None):
        self.description = description
        self.nodes = nodes if nodes is not None else []
        self.links = links if links is not None else []

    def get_location_by_description(self, description: str) -> Location:
        """
        returns a location in the network matching the description argument.
        """
        for location in self.nodes:
            if location.description == description:
                return location
        return None

    def get_availability_rank(self) -> list:
        """
        Returns the node indexes sorted by decreasing availability. Ties are broken by index.
        """
        return sorted(range(len(self.nodes)), key = lambda v: (-self.nodes[v].availability, v))

    def get_rank_positions(self) -> list:
        """
        Returns, for each node index, its position in the availability rank.
        """
        positions = [0] * len(self.nodes)
        for position, v in enumerate(self.get_availability_rank()):
            positions[v] = position
        return positions

    def to_json(self) -> dict:
        """
        Returns a json dictionary describing the network.
        """
        to_return = {"name": self.description, "nodes": [], "links": []}
        for node in self.nodes:
            to_return["nodes"].append(node.to_json())
        for link in self.links:
            to_return["links"].append(link.to_json())
        return to_return

    def save_as_json(self, filename = None):
        """
        saves the network as a JSON to filename.json
        """
        to_dump = self.to_json()
        if filename is not None:
            if filename[-5:] != ".json":
                filename = filename + ".json"
        else:
            filename = self.description + ".json"

        with open(filename, 'w') as fp:
            json.dump(to_dump, fp, indent=4, separators=(", ", ": "))

    def load_from_dict(self, data: dict):
        """
        Given a json dictionary, loads the nodes and links.
        """
        assert list(data.keys()) == ["name", "nodes", "links"], "Keys in JSON don't match expected input for type network."

        self.description, self.nodes, self.links = data["name"], [], []
        for node in data["nodes"]:
            toAdd = Node()
            toAdd.load_from_dict(node)
            self.nodes.append(toAdd)

        # Adds links by matching id's of newly created nodes.
        for link in data["links"]:
            assert list(link.keys()) == ["source", "sink", "bandwidth", "delay"], "Keys in JSON don't match expected input for type link."
            toAdd = Link()
            for node in self.nodes:
                if node.id == link["source"]:
                    toAdd.source = node
                elif node.id == link["sink"]:
                    toAdd.sink = node
            if toAdd.source is None or toAdd.sink is None:
                raise ValueError("No source or sink found with id for link {}.".format(link))
            toAdd.bandwidth = link["bandwidth"]
            toAdd.delay = link["delay"]
            self.links.append(toAdd)

    def load_from_json(self, filename):
        """
        Given a json file, it loads the data and stores as instance of the network.
        """
        if filename[-5:] != ".json":
            filename = filename + ".json"

        with open(filename) as f:
            data = json.load(f)
        self.load_from_dict(data)

    def __str__(self):
        """
        Prints the network to string.
        """
        to_return = "Name:\n"
        to_return += "\t{}\n".format(self.description)
        to_return += "Nodes:\n"
        for node in self.nodes:
            to_return += "\t" + str(node.to_json()) + "\n"
        to_return += "Links:\n"
        for link in self.links:
            to_return += "\t" + str(link.to_json()) + "\n"
        return to_return

    def save_as_dot(self, filename = None, placement: dict = None):
        """
        saves the network topology as a DOT to filename.dot. If a placement dictionary {node description: [vnf descriptions]}
        is given, the installed VNFs are written in the node labels and used nodes are filled.
        """
        if filename is not None:
            if filename[-4:] != ".dot":
                filename = filename + ".dot"
        else:
            filename = self.description + ".dot"

        plot = gvz.Digraph()
        for node in self.nodes:
            installed = placement.get(node.description, []) if placement is not None else []
            if installed:
                label = "{}\n{}".format(node.description, ", ".join(installed))
                plot.node(name=str(node.id), label=label, style="filled")
            else:
                plot.node(name=str(node.id), label=node.description)

        for link in self.links:
            plot.edge(str(link.source.id), str(link.sink.id), label=str(link.delay))

        with open(filename, "w") as f:
            f.write(plot.source)

import itertools
import json

class VNF(object):
    id_iter = itertools.count()
    r"""
    Class representing a VNF type used by SFCs
        \param description      String description of vnf
        \param consumption      Float resource consumption factor (capacity used per unit of bandwidth)
        \param cost             Float installation cost factor of the vnf
    """
    def __init__(self, description: str = None, consumption: float = 1, cost: float = 1, id: int = None):
        self.id = next(VNF.id_iter) if id is None else id
        self.description = description
        self.consumption = consumption
        self.cost = cost

    def __str__(self):
        """
        string representation of vnf
        """
        return self.description

    def to_json(self) -> dict:
        """
        Returns a json dictionary describing the vnf.
        """
        return {"id": self.id, "name": self.description, "consumption": self.consumption, "cost": self.cost}

    def load_from_dict(self, data: dict):
        """
        Given a json dictionary, loads the attributes.
        """
        assert list(data.keys()) == ["id", "name", "consumption", "cost"], "Keys in JSON don't match expected input for type vnf."
        self.id, self.description, self.consumption, self.cost = data["id"], data["name"], data["consumption"], data["cost"]

    def save_as_json(self, filename = None):
        """
        saves the vnf as a JSON to filename.json
        """
        to_dump = self.to_json()
        if filename is not None:
            if filename[-5:] != ".json":
                filename = filename + ".json"
        else:
            filename = self.description + ".json"

        with open(filename, 'w') as fp:
            json.dump(to_dump, fp, indent=4, separators=(", ", ": "))

    def load_from_json(self, filename: str):
        """
        Given a json file, it loads the data and stores as instance of VNF.
        """
        if filename[-5:] != ".json":
            filename = filename + ".json"

        with open(filename) as f:
            data = json.load(f)
        self.load_from_dict(data)

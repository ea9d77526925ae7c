import json
import sys
import csv
import os

def result_row(file_path: str) -> dict:
    """
    Reads a result json and returns the row written to the csv file.
    """
    with open(file_path) as f:
        data = json.load(f)

    # Gets experiment params and results
    result = {}
    result["instance"] = os.path.basename(file_path).split(".")[0]
    result["approximation"] = data["parameters"]["approximation"]
    result["time"] = data["runtime"]
    result["obj"] = data["objective"]
    result["lb"] = data["lower bound"]
    result["gap"] = 100 * data["gap"]
    result["nodes"] = data["number of nodes explored"]
    result["lazy"] = data["callback"]["lazy constraints"]
    result["usercuts"] = data["callback"]["user cuts"]
    result["heurcuts"] = data["callback"]["heuristic availability cuts"]
    result["heursols"] = data["callback"]["heuristic solutions"]
    result["cbtime"] = data["callback"]["callback time"]
    result["violations"] = data["number of availability violations"]
    result["maxviolation"] = data["max availability violation"]
    return result

def append_to_csv(results: list, csv_path: str):
    """
    Appends the result rows to the csv file, writing the header if the file is new.
    """
    keys = results[0].keys()
    if os.path.exists(csv_path):
        with open(csv_path, "a", newline='') as f:
            writer = csv.DictWriter(f, keys)
            writer.writerows(results)
    else:
        with open(csv_path, "w+", newline='') as f:
            writer = csv.DictWriter(f, keys)
            writer.writeheader()
            writer.writerows(results)

if __name__ == "__main__":
    """
    This script takes a solution json and appends results to csv file.
    """
    # command line arguments
    if len(sys.argv) != 3:
        raise ValueError("Script should take 2 arguments:\n\t 1. The path to the result file.\n\t 2. The path to the csv file.")
    append_to_csv([result_row(sys.argv[1])], sys.argv[2])
